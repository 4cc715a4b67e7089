from datetime import datetime, timezone

from PlantDiary.enrichment.generator import DiaryGenerator, PromptAwareDiaryGenerator

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-payload"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class ScriptedGenerator(PromptAwareDiaryGenerator):
    """Returns (or raises) scripted responses in order, then `default`."""

    def __init__(self, responses=None, default="grew a leaf"):
        self.responses = list(responses or [])
        self.default = default
        self.calls = []

    def _next(self):
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, BaseException):
                raise response
            return response
        return self.default

    def generate(self, image_path):
        self.calls.append((image_path, None))
        return self._next()

    def generate_with_prompt(self, image_path, prompt):
        self.calls.append((image_path, prompt))
        return self._next()


class PlainGenerator(DiaryGenerator):
    def __init__(self, text="plain diary"):
        self.text = text
        self.calls = []

    def generate(self, image_path):
        self.calls.append(image_path)
        return self.text
