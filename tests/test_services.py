import base64
from pathlib import Path

import pytest
import requests
from botocore.exceptions import ClientError

from storybook.ai_generation import (
    DEFAULT_RENDER_SETTINGS,
    NO_TEXT_PROMPT,
    ReplicateImageGenerator,
    StabilityImageGenerator,
    WeightedPrompt,
)
from storybook.common import (
    ChatResult,
    ConfigurationError,
    LiteLLMTextSynthesizer,
    LocalIOFailure,
    ResponseShapeViolation,
    UpstreamCallFailure,
    call_chat_completion,
)
from storybook.publishing import S3ArtifactPublisher

PROMPTS = [WeightedPrompt(text="a fox by a river"), NO_TEXT_PROMPT]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", content=b""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _stability(session):
    return StabilityImageGenerator(api_key="sk-test", engine="stable-diffusion-xl-1024-v1-0", session=session)


def test_stability_request_shape():
    encoded = base64.b64encode(b"png-bytes").decode("ascii")
    session = FakeSession(FakeResponse(payload={"artifacts": [{"base64": encoded, "finishReason": "SUCCESS", "seed": 0}]}))

    artifacts = _stability(session).render(PROMPTS, DEFAULT_RENDER_SETTINGS)

    assert [artifact.image_bytes for artifact in artifacts] == [b"png-bytes"]
    url, kwargs = session.calls[0]
    assert url == "https://api.stability.ai/v1/generation/stable-diffusion-xl-1024-v1-0/text-to-image"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"] == {
        "steps": 40,
        "width": 1344,
        "height": 768,
        "seed": 0,
        "cfg_scale": 10,
        "samples": 1,
        "text_prompts": [
            {"text": "a fox by a river", "weight": 1},
            {"text": "writing words letters alphabet text", "weight": -1},
        ],
    }


def test_stability_non_success_status_is_upstream_failure():
    session = FakeSession(FakeResponse(status_code=500, text="boom"))

    with pytest.raises(UpstreamCallFailure) as excinfo:
        _stability(session).render(PROMPTS)
    assert excinfo.value.user_message == "I messed this painting up. Sorry."


def test_stability_transport_error_is_upstream_failure():
    session = FakeSession(error=requests.ConnectionError("unreachable"))

    with pytest.raises(UpstreamCallFailure):
        _stability(session).render(PROMPTS)


@pytest.mark.parametrize(
    "payload",
    [None, {"result": []}, {"artifacts": [{"base64": "not base64!!"}]}, {"artifacts": [{}]}],
)
def test_stability_malformed_payload_is_shape_violation(payload):
    session = FakeSession(FakeResponse(payload=payload))

    with pytest.raises(ResponseShapeViolation):
        _stability(session).render(PROMPTS)


class FakeReplicateClient:
    def __init__(self, outputs=None, error=None):
        self.outputs = outputs
        self.error = error
        self.calls = []

    def run(self, model, input):
        self.calls.append((model, input))
        if self.error is not None:
            raise self.error
        return self.outputs


class FakeFileOutput:
    def __init__(self, data):
        self._data = data

    def read(self):
        return self._data


def test_replicate_sdxl_payload_splits_negative_prompts():
    client = FakeReplicateClient(outputs=[FakeFileOutput(b"png")])
    generator = ReplicateImageGenerator(model_identifier="stability-ai/sdxl", client=client)

    artifacts = generator.render(PROMPTS)

    assert [artifact.image_bytes for artifact in artifacts] == [b"png"]
    model, payload = client.calls[0]
    assert model == "stability-ai/sdxl"
    assert payload["prompt"] == "a fox by a river"
    assert payload["negative_prompt"] == "writing words letters alphabet text"
    assert payload["width"] == 1344 and payload["num_inference_steps"] == 40


def test_replicate_downloads_url_outputs(monkeypatch):
    fetched = []

    def fake_get(url, timeout):
        fetched.append(url)
        return FakeResponse(content=b"downloaded")

    monkeypatch.setattr("storybook.ai_generation.replicate_service.requests.get", fake_get)
    client = FakeReplicateClient(outputs="https://replicate.delivery/out.png")
    generator = ReplicateImageGenerator(model_identifier="black-forest-labs/flux-schnell", client=client)

    artifacts = generator.render(PROMPTS)

    assert [artifact.image_bytes for artifact in artifacts] == [b"downloaded"]
    assert fetched == ["https://replicate.delivery/out.png"]
    assert "Avoid: writing words" in client.calls[0][1]["prompt"]


def test_replicate_errors_are_upstream_failures():
    client = FakeReplicateClient(error=RuntimeError("model exploded"))
    generator = ReplicateImageGenerator(model_identifier="stability-ai/sdxl", client=client)

    with pytest.raises(UpstreamCallFailure):
        generator.render(PROMPTS)


def test_replicate_rejects_unknown_models_before_running():
    client = FakeReplicateClient()

    with pytest.raises(ConfigurationError):
        ReplicateImageGenerator(model_identifier="someone/unknown", client=client)
    assert client.calls == []


def test_replicate_accepts_versioned_identifiers():
    client = FakeReplicateClient(outputs=[FakeFileOutput(b"png")])
    generator = ReplicateImageGenerator(model_identifier="stability-ai/sdxl:abc123", client=client)

    generator.render(PROMPTS)

    assert client.calls[0][0] == "stability-ai/sdxl:abc123"


class FakeS3Client:
    def __init__(self, error=None):
        self.error = error
        self.uploads = []

    def upload_file(self, filename, bucket, key, ExtraArgs=None):
        if self.error is not None:
            raise self.error
        self.uploads.append((filename, bucket, key, ExtraArgs))


def _image_file(tmp_path: Path) -> Path:
    path = tmp_path / "story-123" / "2.png"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"png")
    return path


def test_s3_publisher_uploads_and_returns_public_url(tmp_path):
    client = FakeS3Client()
    publisher = S3ArtifactPublisher(bucket_name="books", region="us-west-2", client=client)
    path = _image_file(tmp_path)

    url = publisher.publish(path)

    assert url == "https://books.s3.us-west-2.amazonaws.com/STORYBOOK_story-123_2.png"
    assert client.uploads == [
        (str(path), "books", "STORYBOOK_story-123_2.png", {"ContentType": "image/png"})
    ]


def test_s3_publisher_missing_file_is_local_failure(tmp_path):
    publisher = S3ArtifactPublisher(bucket_name="books", region="us-west-2", client=FakeS3Client())

    with pytest.raises(LocalIOFailure):
        publisher.publish(tmp_path / "missing.png")


def test_s3_publisher_client_error_is_upstream_failure(tmp_path):
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    publisher = S3ArtifactPublisher(bucket_name="books", region="us-west-2", client=FakeS3Client(error=error))

    with pytest.raises(UpstreamCallFailure):
        publisher.publish(_image_file(tmp_path))


def test_text_synthesizer_sends_single_user_message():
    calls = []

    def fake_completion(**kwargs):
        calls.append(kwargs)
        return ChatResult(text="Once upon a time.", raw=None)

    synthesizer = LiteLLMTextSynthesizer(model="gpt-3.5-turbo", api_key="key", completion_fn=fake_completion)

    assert synthesizer.complete("Tell me a story") == "Once upon a time."
    assert calls[0]["messages"] == [{"role": "user", "content": "Tell me a story"}]
    assert calls[0]["api_key"] == "key"


def test_text_synthesizer_wraps_failures_with_user_message():
    def failing_completion(**kwargs):
        raise RuntimeError("rate limited")

    synthesizer = LiteLLMTextSynthesizer(model="gpt-3.5-turbo", completion_fn=failing_completion)

    with pytest.raises(UpstreamCallFailure) as excinfo:
        synthesizer.complete("Tell me a story", user_message="Try again later!")
    assert excinfo.value.user_message == "Try again later!"


def test_text_synthesizer_rejects_empty_answers():
    synthesizer = LiteLLMTextSynthesizer(
        model="gpt-3.5-turbo",
        completion_fn=lambda **kwargs: ChatResult(text="", raw=None),
    )

    with pytest.raises(UpstreamCallFailure):
        synthesizer.complete("Tell me a story")


def test_call_chat_completion_rejects_malformed_response(monkeypatch):
    monkeypatch.setattr("storybook.common.llm.completion", lambda **kwargs: {"choices": []})

    with pytest.raises(ResponseShapeViolation):
        call_chat_completion(model="gpt-3.5-turbo", messages=[{"role": "user", "content": "hi"}])


def test_call_chat_completion_returns_stripped_text(monkeypatch):
    response = {"choices": [{"message": {"content": "  TITLE: \"Fox\"  "}}]}
    monkeypatch.setattr("storybook.common.llm.completion", lambda **kwargs: response)

    result = call_chat_completion(model="gpt-3.5-turbo", messages=[])

    assert result.text == 'TITLE: "Fox"'
    assert result.raw is response
