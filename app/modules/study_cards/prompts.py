"""Instruction template for study card generation."""

from __future__ import annotations

PROMPT_TEMPLATE = """The following text was extracted from a PDF of study material. Analyze it and turn the key concepts most likely to appear on an exam into 5 to 10 study cards.

Respond with a JSON array in exactly this shape:
[
  {{
    "title": "Short, punchy title (at most a few words)",
    "content": "Detailed explanation made of several paragraphs",
    "emoji": "One related emoji",
    "pageNumber": approximate_page_number_where_this_appears_or_null
  }}
]

Requirements:
- Respond ONLY with a valid JSON array.
- Do not include any other explanation, text, or code fences.
- Every element has exactly the keys "title", "content", "emoji" and "pageNumber".
- The title must be short and easy to remember.
- The content must follow these rules:
  * Keep it to about 3 to 5 sentences (not too long).
  * Always split it into several paragraphs separated by the newline character \\n.
  * Each paragraph has 2 to 3 sentences.
  * Pick whichever form fits best:
    - Definition: "X means ... ."
    - Explanation: "This concept relates to ... ."
    - Summary: explain the core idea in detail.
    - Comparison: "The difference between A and B is ... ."
    - Example: "For example, ... ."
  * Define important terms and concepts clearly.
  * Each paragraph must be clear and readable on its own.
  * Wrap key words as **word** (for example: **radioimmunoassay**).
  * Wrap important phrases as __phrase__ (for example: __measured precisely__).
- pageNumber is your estimate of where in the PDF the content appears, as an integer (it does not need to be exact).
- Use null for pageNumber if you cannot estimate it.
{page_hint}
PDF content:
{text}"""


def _page_hint(page_count: int | None) -> str:
    if not page_count:
        return ""
    return f"- The PDF has {page_count} page(s); pageNumber must be between 1 and {page_count}.\n"


def build_prompt(text: str, page_count: int | None = None) -> str:
    return PROMPT_TEMPLATE.format(text=text, page_hint=_page_hint(page_count))
