"""
Fake GenerationClient implementations for tests.
"""
import json
import threading
import time

from agents.generation_client import GenerationError


class FailingClient:
    """Every call fails."""

    def __init__(self):
        self.text_calls = 0
        self.media_requests = []
        self._lock = threading.Lock()

    def generate_text(self, prompt):
        self.text_calls += 1
        raise GenerationError("service unavailable")

    def generate_media(self, request):
        with self._lock:
            self.media_requests.append(request)
        raise GenerationError("service unavailable")


class SlowFailingClient(FailingClient):
    """Media calls wait briefly before failing, so worker threads overlap."""

    def __init__(self, delay=0.01):
        super().__init__()
        self.delay = delay

    def generate_media(self, request):
        time.sleep(self.delay)
        return super().generate_media(request)


def media_urls(request):
    """Well-formed media response sized to request['count']."""
    count = request.get("count", 1)
    if request.get("kind") == "video":
        return json.dumps([
            {
                "url": f"https://cdn.example.com/video/{i}.mp4",
                "thumbnailUrl": f"https://cdn.example.com/video/{i}.jpg",
            }
            for i in range(count)
        ])
    return json.dumps([f"https://cdn.example.com/photo/{i}.png" for i in range(count)])


class ScriptedClient:
    """
    Canned responses.

    text: string returned by generate_text
    media: string, or callable(request) -> string (may raise)
    """

    def __init__(self, text="", media=media_urls):
        self.text = text
        self.media = media
        self.prompts = []
        self.media_requests = []
        self._lock = threading.Lock()

    def generate_text(self, prompt):
        self.prompts.append(prompt)
        return self.text

    def generate_media(self, request):
        with self._lock:
            self.media_requests.append(request)
        if callable(self.media):
            return self.media(request)
        return self.media


def failing_for(name):
    """media callable that fails only for photo prompts mentioning `name`."""
    def _media(request):
        if request.get("kind") == "image" and f"of {name}," in request.get("prompt", ""):
            raise GenerationError(f"quota exceeded for {name}")
        return media_urls(request)
    return _media


def characters_json(*names):
    return json.dumps([
        {
            "name": name,
            "description": f"{name} from the script",
            "traits": ["Brave", "Kind"],
            "role": "Protagonist" if i == 0 else "Supporting Character",
        }
        for i, name in enumerate(names)
    ])
