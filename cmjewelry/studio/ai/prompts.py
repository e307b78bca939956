"""Fixed instructions sent to the generative models."""

from __future__ import annotations

from ..presets import AspectRatio

_EDIT_TEMPLATE = (
    "Act as a professional high-end jewelry photo editor. {prompt}. "
    "{framing}"
    "Return ONLY the edited image part. "
    "Maintain high resolution and realistic lighting."
)

_FRAMING = {
    AspectRatio.FEED: (
        "Reframe the composition to a 4:5 portrait aspect ratio for a social "
        "media feed post, keeping the jewelry centered and fully visible. "
    ),
    AspectRatio.STORY: (
        "Reframe the composition to a 9:16 vertical aspect ratio for a social "
        "media story, extending the background naturally above and below the "
        "jewelry. "
    ),
}

TRANSCRIBE_PROMPT = (
    "Transcribe this audio exactly as spoken. It is a staff member describing "
    "an edit for a jewelry photo. Return only the transcribed text, with no "
    "commentary. If nothing is said, return an empty response."
)

# Lines the brand voice requires at the end of every caption.
REQUIRED_CALL_TO_ACTIONS: tuple[str, ...] = (
    "📍 Pickup available at our studio",
    "💬 Order by DM or WhatsApp",
)

_CAPTION_TEMPLATE = """\
You are the social media voice of CM Jewelry, a high-end jewelry studio.
Write one Instagram caption for the piece shown in the image.

Brand voice:
- Elegant, warm and confident. Never pushy.
- Two or three short sentences describing the piece (metal, stones, finish,
  the feeling it evokes). Do not invent prices or materials you cannot see.
- At most three tasteful emojis in the description.
- Then a blank line, then these two lines exactly as written:
{ctas}
- Then a blank line and 5 to 8 relevant hashtags, including #CMJewelry.

{idea}Return only the caption text.
"""


def edit_instruction(prompt: str, aspect_ratio: AspectRatio | None = None) -> str:
    framing = _FRAMING.get(aspect_ratio, "") if aspect_ratio is not None else ""
    return _EDIT_TEMPLATE.format(prompt=prompt.strip().rstrip("."), framing=framing)


def caption_prompt(idea: str = "") -> str:
    idea = idea.strip()
    idea_line = f"Steer the caption toward this idea from the staff: {idea}\n\n" if idea else ""
    return _CAPTION_TEMPLATE.format(
        ctas="\n".join(REQUIRED_CALL_TO_ACTIONS),
        idea=idea_line,
    )


def missing_call_to_actions(caption: str) -> list[str]:
    """Return the required call-to-action lines absent from ``caption``."""
    return [cta for cta in REQUIRED_CALL_TO_ACTIONS if cta not in caption]
