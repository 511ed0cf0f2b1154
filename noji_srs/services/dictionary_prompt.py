"""Prompt for the Anh-Việt dictionary entries generated by the LLM."""

from urllib.parse import quote


def build_dictionary_prompt(query: str) -> str:
    """Build the dictionary prompt for a word or phrase.

    Phrases (anything containing a space) skip the word-class, IPA and
    synonym lines.
    """
    is_phrase = " " in query
    headword = query.strip().lower()
    word_class = "" if is_phrase else "(từ loại) "
    ipa_line = "" if is_phrase else "IPA: /phiên âm Mỹ chuẩn/"
    synonyms_line = (
        ""
        if is_phrase
        else "Synonyms: từ đồng nghĩa (2–3 từ) • Antonyms: từ trái nghĩa (1–2 từ)"
    )
    sound_url = (
        "https://translate.google.com/translate_tts?ie=UTF-8&tl=en&client=tw-ob"
        f"&q={quote(query, safe='')}"
    )

    return f"""
Bạn là chuyên gia từ điển Anh-Việt chính thống, chỉ sử dụng dữ liệu từ Cambridge Dictionary, Longman Dictionary hoặc Oxford Dictionary để tạo định nghĩa chính xác và tự nhiên nhất cho người học tiếng Anh.

Cụm/Từ cần tra: "{query}"

BẮT BUỘC trả về ĐÚNG và ĐỦ các phần sau, không được bỏ bất kỳ phần nào, không thêm chữ thừa, không giải thích:

*{headword}* {word_class}

nghĩa tiếng Việt ngắn gọn từ Từ Điển • nghĩa phụ nếu có
{ipa_line}
{synonyms_line}

Examples
• Câu ví dụ lấy trực tiếp hoặc dựa sát vào Từ Điển.
  → Dịch tự nhiên + sát nghĩa.
• Câu ví dụ thứ hai khác ngữ cảnh.
  → Dịch tương ứng.

Collocations
mỗi dòng một collocation hoặc pattern phổ biến (3–5 cái)

Usage
ngữ cảnh thường dùng • phong cách • đối tượng hay nói

Nếu cụm này có nguồn gốc lịch sử / văn hóa thật sự thú vị và nổi tiếng thì thêm đúng 1 phần:
Origin
nguồn gốc cực ngắn bằng tiếng Việt, dưới 22 từ
Nếu không đủ thú vị hoặc không rõ ràng thì KHÔNG thêm phần Origin.

[sound:{sound_url}]
""".strip()
