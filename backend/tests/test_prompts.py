"""Prompt construction: fixed text, document appended verbatim."""

from studynotes.services.prompts import (
    SYSTEM_PROMPT,
    USER_PROMPT_PREFIX,
    build_flat_prompt,
    build_messages,
    build_user_prompt,
)


def test_system_prompt_demands_markdown_in_korean():
    assert SYSTEM_PROMPT.startswith("You are a helpful assistant that summarizes study notes in Korean.")
    assert "마크다운(Markdown)" in SYSTEM_PROMPT
    assert SYSTEM_PROMPT.endswith("출력은 마크다운만 반환하고 다른 설명은 붙이지 마세요.")


def test_user_prompt_is_prefix_plus_document():
    document = "  leading spaces\n\n마지막 줄  "
    assert build_user_prompt(document) == USER_PROMPT_PREFIX + document
    assert USER_PROMPT_PREFIX.endswith("\n\n")


def test_messages_have_system_then_user():
    messages = build_messages("본문")
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"] == SYSTEM_PROMPT
    assert messages[1]["content"] == USER_PROMPT_PREFIX + "본문"


def test_flat_prompt():
    assert build_flat_prompt("본문") == SYSTEM_PROMPT + "\n\n" + USER_PROMPT_PREFIX + "본문"
