from types import SimpleNamespace

from pdf_reading_order.llm_reorder import build_reorder_prompt, parse_permutation, reorder_lines_with_llm

from builders import left, right, texts


def _client(content=None, error=None):
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        if error is not None:
            raise error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client, calls


def _lines():
    return [left("left 1", 500), right("right 1", 500), left("left 2", 480), right("right 2", 480)]


def test_parse_permutation():
    assert parse_permutation("[0, 2, 1, 3]", 4) == [0, 2, 1, 3]
    assert parse_permutation(" [1, 0]\n", 2) == [1, 0]
    assert parse_permutation("[0, 0]", 2) is None
    assert parse_permutation("[0, 1]", 3) is None
    assert parse_permutation("[0, true]", 2) is None
    assert parse_permutation("not json", 2) is None
    assert parse_permutation('{"order": [0]}', 1) is None


def test_prompt_lists_every_line():
    prompt = build_reorder_prompt(_lines())
    assert '"index": 3' in prompt
    assert '"text": "right 2"' in prompt


def test_reorder_applies_model_permutation():
    client, calls = _client("[0, 2, 1, 3]")
    result = reorder_lines_with_llm(_lines(), client=client, model="test-model")
    assert result.reordered
    assert texts(result.lines) == ["left 1", "left 2", "right 1", "right 2"]
    assert calls[0]["model"] == "test-model"
    assert calls[0]["messages"][0]["role"] == "system"


def test_invalid_answer_keeps_original_order():
    client, _ = _client("[0, 1]")
    result = reorder_lines_with_llm(_lines(), client=client)
    assert not result.reordered
    assert texts(result.lines) == texts(_lines())


def test_empty_answer_keeps_original_order():
    client, _ = _client("")
    assert not reorder_lines_with_llm(_lines(), client=client).reordered


def test_client_error_keeps_original_order():
    client, _ = _client(error=RuntimeError("boom"))
    result = reorder_lines_with_llm(_lines(), client=client)
    assert not result.reordered
    assert len(result.lines) == 4


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    result = reorder_lines_with_llm(_lines())
    assert not result.reordered
    assert texts(result.lines) == texts(_lines())


def test_no_lines_skips_the_model():
    client, calls = _client("[]")
    assert reorder_lines_with_llm([], client=client).lines == []
    assert calls == []
