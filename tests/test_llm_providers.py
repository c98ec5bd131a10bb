"""
Tests de los proveedores LLM con clientes de SDK falsos (sin red).
"""

from types import SimpleNamespace

import pytest

from consenso.analysis import GeminiProvider, GroqProvider, ScoringRequest, get_llm_provider

REQUEST = ScoringRequest(system_prompt="Compare criteria", user_prompt="User A criteria: {}")


class RecordingCall:
    """Callable async que guarda los kwargs y devuelve una respuesta fija."""

    def __init__(self, response):
        self.response = response
        self.kwargs = None

    async def __call__(self, **kwargs):
        self.kwargs = kwargs
        return self.response


def groq_client(content, total_tokens=42):
    create = RecordingCall(
        SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(total_tokens=total_tokens),
        )
    )
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


def gemini_client(text, total_tokens=17):
    generate_content = RecordingCall(
        SimpleNamespace(text=text, usage_metadata=SimpleNamespace(total_token_count=total_tokens))
    )
    client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
    return client, generate_content


class TestGroqProvider:
    async def test_sends_json_mode_chat_request(self):
        client, create = groq_client(' {"scorePercent": 70} ')
        provider = GroqProvider(model="llama-test", client=client)

        response = await provider.generate(REQUEST)

        assert create.kwargs["response_format"] == {"type": "json_object"}
        assert create.kwargs["model"] == "llama-test"
        assert create.kwargs["messages"] == [
            {"role": "system", "content": "Compare criteria"},
            {"role": "user", "content": "User A criteria: {}"},
        ]
        assert create.kwargs["max_tokens"] == 600
        assert response.text == '{"scorePercent": 70}'
        assert (response.provider, response.tokens_used) == ("groq", 42)

    async def test_empty_content(self):
        client, _ = groq_client(None)
        response = await GroqProvider(model="llama-test", client=client).generate(REQUEST)
        assert response.text == ""


class TestGeminiProvider:
    async def test_sends_system_instruction_and_json_mime_type(self):
        client, generate_content = gemini_client('{"scorePercent": 30}\n')
        provider = GeminiProvider(model="gemini-test", client=client)

        response = await provider.generate(REQUEST)

        config = generate_content.kwargs["config"]
        assert generate_content.kwargs["model"] == "gemini-test"
        assert generate_content.kwargs["contents"] == "User A criteria: {}"
        assert "Compare criteria" in str(config.system_instruction)
        assert config.response_mime_type == "application/json"
        assert config.max_output_tokens == 600
        assert response.text == '{"scorePercent": 30}'
        assert (response.provider, response.tokens_used) == ("gemini", 17)


class TestGetLLMProvider:
    def test_selects_by_name(self):
        client, _ = groq_client("{}")
        assert isinstance(get_llm_provider("GROQ", client=client), GroqProvider)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="no soportado"):
            get_llm_provider("openai")
