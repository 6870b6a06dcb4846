"""Unit tests for the generation client: mock genai, verify prompts and credential guard."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from content_service.generation import (
    PROMPT_TEMPLATES,
    GenerationConfigError,
    GenerationError,
    GenerationMode,
    _get_gemini_client,
    build_prompt,
    check_generation_service,
    generate_content,
    generate_text,
)


@pytest.fixture(autouse=True)
def _fresh_client_cache():
    _get_gemini_client.cache_clear()
    yield
    _get_gemini_client.cache_clear()


def _mock_client(text: str = "model output") -> MagicMock:
    response = MagicMock()
    response.text = text
    client = MagicMock()
    client.models.generate_content.return_value = response
    return client


class TestBuildPrompt:
    def test_summary_prompt(self):
        assert build_prompt("summary", "Hello world") == "Summarize in 5 bullet points:\n\nHello world"

    @pytest.mark.parametrize(
        ("mode", "instruction"),
        [
            (GenerationMode.HASHTAGS, "Generate 12 trending hashtags:"),
            (GenerationMode.REWRITE, "Rewrite in LinkedIn style:"),
            (GenerationMode.SENTIMENT, "Analyze sentiment of this text:"),
            (GenerationMode.ENGAGEMENT, "Suggest ways to improve social media engagement:"),
        ],
    )
    def test_each_mode_has_fixed_instruction(self, mode, instruction):
        assert build_prompt(mode, "body").startswith(instruction + "\n\n")

    def test_every_mode_has_a_template(self):
        assert set(PROMPT_TEMPLATES) == set(GenerationMode)

    def test_text_is_not_altered(self):
        text = "  leading space\n\nline two\t" + "x" * 50_000
        assert build_prompt("rewrite", text).endswith("\n\n" + text)

    def test_blank_text_rejected(self):
        with pytest.raises(ValueError, match="blank"):
            build_prompt("summary", "   ")

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            build_prompt("poem", "text")


class TestCredentials:
    def test_missing_key_fails_before_client_is_built(self):
        with patch("content_service.generation.genai.Client") as client_cls:
            with pytest.raises(GenerationConfigError, match="GEMINI_API_KEY"):
                generate_text("prompt")
        client_cls.assert_not_called()

    def test_config_error_is_distinct_from_remote_error(self):
        assert not issubclass(GenerationConfigError, GenerationError)
        assert not issubclass(GenerationError, GenerationConfigError)

    def test_api_key_client(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k-123")
        with patch("content_service.generation.genai.Client") as client_cls:
            _get_gemini_client()
        client_cls.assert_called_once_with(api_key="k-123")

    def test_vertex_client_on_gcp(self, monkeypatch):
        monkeypatch.setenv("K_SERVICE", "content-service")
        with patch("content_service.generation.genai.Client") as client_cls:
            _get_gemini_client()
        assert client_cls.call_args.kwargs["vertexai"] is True

    def test_check_generation_service(self, monkeypatch):
        assert check_generation_service() is False
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        _get_gemini_client.cache_clear()
        with patch("content_service.generation.genai.Client"):
            assert check_generation_service() is True


class TestGenerateText:
    @patch("content_service.generation._get_gemini_client")
    def test_returns_raw_text(self, mock_client_fn):
        mock_client_fn.return_value = _mock_client("- point one\n- point two")

        assert generate_text("prompt") == "- point one\n- point two"

    @patch("content_service.generation._get_gemini_client")
    def test_model_and_prompt_forwarded(self, mock_client_fn):
        client = _mock_client()
        mock_client_fn.return_value = client

        generate_text("the prompt", model="gemini-test")

        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs == {"model": "gemini-test", "contents": "the prompt"}

    @patch("content_service.generation._get_gemini_client")
    def test_remote_failure_surfaces_message(self, mock_client_fn):
        from google.genai import errors as genai_errors

        client = MagicMock()
        client.models.generate_content.side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
        )
        mock_client_fn.return_value = client

        with pytest.raises(GenerationError, match="quota exceeded"):
            generate_text("prompt")

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("connection refused"),
        ],
    )
    @patch("content_service.generation._get_gemini_client")
    def test_transport_failure_becomes_generation_error(self, mock_client_fn, error):
        client = MagicMock()
        client.models.generate_content.side_effect = error
        mock_client_fn.return_value = client

        with pytest.raises(GenerationError, match="connection refused"):
            generate_text("prompt")

    @patch("content_service.generation._get_gemini_client")
    def test_vertex_credential_failure_becomes_generation_error(self, mock_client_fn):
        from google.auth import exceptions as google_auth_exceptions

        client = MagicMock()
        client.models.generate_content.side_effect = google_auth_exceptions.DefaultCredentialsError(
            "Could not automatically determine credentials"
        )
        mock_client_fn.return_value = client

        with pytest.raises(GenerationError, match="determine credentials"):
            generate_text("prompt")

    @patch("content_service.generation._get_gemini_client")
    def test_none_text_becomes_empty_string(self, mock_client_fn):
        mock_client_fn.return_value = _mock_client(None)  # type: ignore[arg-type]
        assert generate_text("prompt") == ""


class TestGenerateContent:
    @patch("content_service.generation._get_gemini_client")
    async def test_summary_request(self, mock_client_fn):
        client = _mock_client("summary out")
        mock_client_fn.return_value = client

        out = await generate_content("summary", "Hello world")

        assert out == "summary out"
        sent = client.models.generate_content.call_args.kwargs["contents"]
        assert sent == "Summarize in 5 bullet points:\n\nHello world"

    async def test_missing_credential_fails_fast(self):
        with patch("content_service.generation.generate_text") as mock_generate:
            with pytest.raises(GenerationConfigError):
                await generate_content("hashtags", "some text")
        mock_generate.assert_not_called()

    @patch("content_service.generation._get_gemini_client")
    async def test_each_call_is_independent(self, mock_client_fn):
        client = _mock_client("x")
        mock_client_fn.return_value = client

        await generate_content("summary", "first")
        await generate_content("summary", "second")

        calls = [c.kwargs["contents"] for c in client.models.generate_content.call_args_list]
        assert calls == ["Summarize in 5 bullet points:\n\nfirst", "Summarize in 5 bullet points:\n\nsecond"]
