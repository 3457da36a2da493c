from __future__ import annotations

import json
import logging
import os
from typing import Any, List, Optional, Sequence

from openai import OpenAI

from .models import Line, ReorderResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

SYSTEM_PROMPT = (
    "You are an expert in document layout analysis. Your task is to reorder lines of text "
    "that were incorrectly read from a two-column PDF page."
)


def build_reorder_prompt(lines: Sequence[Line]) -> str:
    payload = json.dumps(
        [{"index": i, "text": line.text, "x": line.x, "y": line.y} for i, line in enumerate(lines)]
    )
    return f"""
The following is a JSON array of text lines extracted from a PDF page. They are incorrectly ordered due to a two-column layout being read row-by-row.
The 'x' coordinate indicates the horizontal position. A lower 'x' means the text is on the left.
Your task is to reorder these lines into a correct, logical reading order. First read the left column from top to bottom, then the right column from top to bottom.

Return a JSON array of numbers, where each number is the original index of the line in its correct new position. The output should be only the JSON array.

Example:
Input lines:
[
  {{"index": 0, "text": "left 1", "x": 100, "y": 500}},
  {{"index": 1, "text": "right 1", "x": 400, "y": 500}},
  {{"index": 2, "text": "left 2", "x": 100, "y": 480}},
  {{"index": 3, "text": "right 2", "x": 400, "y": 480}}
]
Correct output:
[0, 2, 1, 3]

Here are the lines to reorder:
{payload}
"""


def parse_permutation(content: str, expected_length: int) -> Optional[List[int]]:
    """The model's answer as a list of indexes, or None unless it is a permutation of range(n)."""
    try:
        data = json.loads(content.strip())
    except json.JSONDecodeError:
        return None
    if not isinstance(data, list) or len(data) != expected_length:
        return None
    if not all(isinstance(i, int) and not isinstance(i, bool) for i in data):
        return None
    if sorted(data) != list(range(expected_length)):
        return None
    return data


def reorder_lines_with_llm(
    lines: Sequence[Line],
    client: Optional[Any] = None,
    model: str = DEFAULT_MODEL,
    api_key: Optional[str] = None,
) -> ReorderResult:
    original = list(lines)
    if not original:
        return ReorderResult(reordered=False, lines=original)

    if client is None:
        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            logger.error("OPENAI_API_KEY environment variable not set.")
            return ReorderResult(reordered=False, lines=original)
        client = OpenAI(api_key=api_key)

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_reorder_prompt(original)},
            ],
        )
        content = response.choices[0].message.content
    except Exception as e:
        logger.error("Error calling the reorder model: %s", e)
        return ReorderResult(reordered=False, lines=original)

    if not content:
        logger.error("Reorder model returned no content.")
        return ReorderResult(reordered=False, lines=original)

    permutation = parse_permutation(content, len(original))
    if permutation is None:
        logger.error("Reorder model returned invalid data format.")
        return ReorderResult(reordered=False, lines=original)

    return ReorderResult(reordered=True, lines=[original[i] for i in permutation])
