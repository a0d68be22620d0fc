"""
Post-processing of a finished backend turn before it is sent to chat.

Reasoning models either wrap their chain of thought in parentheses or separate
it from the final answer with a blank line. Anything else is treated as
unparseable and suppressed.
"""

import re
from typing import List, Tuple

REASONING_PATTERN = re.compile(r"\(([^)]+)\)")
EMOJI_TOKEN_PATTERN = re.compile(r"\[([a-zA-Z0-9]+)\]")


def split_reasoning_text(text: str) -> Tuple[str, str]:
    """
    Split a turn into its reasoning segment and its answer segment.

    The first parenthesized group is the reasoning and is removed once from the
    text to form the answer. Without parentheses the text must contain exactly
    one blank line; otherwise both segments are empty.

    Args:
        text: The accumulated text of one turn.

    Returns:
        Tuple[str, str]: (reasoning, answer)
    """
    match = REASONING_PATTERN.search(text)
    if match:
        reasoning_text = match.group(0)
        return reasoning_text, text.replace(reasoning_text, "", 1)

    parts = text.split("\n\n")
    if len(parts) == 2:
        return parts[0], parts[1]
    return "", ""


def strip_emoji_tokens(text: str) -> str:
    """Remove every ``[token]`` made of ASCII letters and digits.

    Repeats until nothing matches, so tokens exposed by a removal such as
    ``[a[b]]`` go as well.
    """
    while True:
        stripped = EMOJI_TOKEN_PATTERN.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def finalize_turn(
    text: str,
    reasoning_model: bool = False,
    show_reasoning: bool = True,
    remove_emoji: bool = True,
) -> List[str]:
    """
    Turn the accumulated text of one backend turn into chat replies, in order.

    Without ``reasoning_model`` the text is returned unmodified as the only reply.
    With it, the reasoning segment comes first (when ``show_reasoning`` and
    non-empty), then the answer, emoji-stripped when ``remove_emoji`` is set.

    Empty replies are dropped in both modes, so an empty turn posts nothing to
    chat instead of a blank single reply.
    """
    if not reasoning_model:
        return [text] if text else []

    reasoning_text, answer_text = split_reasoning_text(text)
    replies = []
    if show_reasoning and reasoning_text:
        replies.append(reasoning_text)
    if remove_emoji:
        answer_text = strip_emoji_tokens(answer_text)
    if answer_text:
        replies.append(answer_text)
    return replies
