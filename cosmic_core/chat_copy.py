"""User-facing texts for the chat's designed degraded states."""

from dataclasses import dataclass, field

DEFAULT_LANGUAGE = "en"


@dataclass(frozen=True)
class ChatCopy:
    limit_reached: dict[str, str] = field(
        default_factory=lambda: {
            "en": (
                "You've used all {limit} free messages today. "
                "Watch an ad for more or upgrade to premium."
            ),
            "hi": "आज के {limit} मुफ्त संदेश पूरे। विज्ञापन देखकर और प्राप्त करें या प्रीमियम लें।",
        }
    )
    unavailable: dict[str, str] = field(
        default_factory=lambda: {
            "en": "AI isn't available here. Download the app to use full AI features.",
            "hi": "यहाँ AI उपलब्ध नहीं है। पूर्ण AI सुविधाओं के लिए ऐप डाउनलोड करें।",
        }
    )

    def limit_message(self, language: str, limit: int) -> str:
        template = self.limit_reached.get(language) or self.limit_reached[DEFAULT_LANGUAGE]
        return template.format(limit=limit)

    def unavailable_message(self, language: str) -> str:
        return self.unavailable.get(language) or self.unavailable[DEFAULT_LANGUAGE]
