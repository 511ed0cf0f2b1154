"""Card generator: form page and LLM-backed note creation."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from ..core.services import get_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generator"])

_PLAIN_TEXT_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Cache-Control": "public, s-maxage=86400",
    "Access-Control-Allow-Origin": "*",
}

GENERATOR_FORM = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Card Generator</title>
  <style>
    body { font-family: Arial, sans-serif; max-width: 800px; margin: 50px auto; padding: 20px; }
    textarea { width: 100%; min-height: 150px; padding: 10px; font-size: 16px;
               border: 2px solid #ccc; border-radius: 4px; }
    button { margin-top: 10px; padding: 10px 20px; font-size: 16px; background-color: #007bff;
             color: white; border: none; border-radius: 4px; cursor: pointer; }
    button:disabled { background-color: #ccc; cursor: not-allowed; opacity: 0.6; }
    button:hover:not(:disabled) { background-color: #0056b3; }
    #result { margin-top: 20px; padding: 15px; background-color: #f5f5f5; border-radius: 4px;
              white-space: pre-wrap; font-family: monospace; }
    #loading { display: none; margin-top: 10px; color: #007bff; }
  </style>
</head>
<body>
  <h1>Card Generator for Anki/Noji</h1>
  <p>Enter words or sentences separated by commas:</p>
  <form id="cardForm" autocomplete="off">
    <textarea id="input" placeholder="e.g., apple, beautiful, give up, How are you doing?"
              autocomplete="off" spellcheck="false"></textarea>
    <br>
    <button type="submit" id="generateBtn" disabled>Generate Cards</button>
  </form>
  <div id="loading">Loading...</div>
  <pre id="result"></pre>

  <script>
    const inputTextarea = document.getElementById('input');
    const generateBtn = document.getElementById('generateBtn');
    const resultDiv = document.getElementById('result');
    const loadingDiv = document.getElementById('loading');

    inputTextarea.addEventListener('input', () => {
      generateBtn.disabled = !inputTextarea.value.trim();
    });

    document.getElementById('cardForm').addEventListener('submit', async (e) => {
      e.preventDefault();
      const input = inputTextarea.value.trim();
      if (!input) return;

      loadingDiv.style.display = 'block';
      resultDiv.textContent = '';
      generateBtn.disabled = true;

      try {
        const response = await fetch('/cards?q=' + encodeURIComponent(input));
        resultDiv.textContent = await response.text();
      } catch (error) {
        resultDiv.textContent = 'Error: ' + error.message;
      } finally {
        loadingDiv.style.display = 'none';
        generateBtn.disabled = !inputTextarea.value.trim();
      }
    });
  </script>
</body>
</html>
"""


@router.get("/cards")
async def generate_cards(q: Optional[str] = Query(default=None)):
    """Without ``q`` serve the form; with ``q`` generate and store entries."""
    query = (q or "").strip()
    if not query:
        return HTMLResponse(GENERATOR_FORM)

    try:
        output = await get_service("notes").generate_cards(query)
    except Exception as e:
        logger.error(f"LLM generation failed: {type(e).__name__}: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Gemini API error", "message": str(e)},
        )

    return PlainTextResponse(output, headers=_PLAIN_TEXT_HEADERS)
