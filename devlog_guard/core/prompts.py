"""
Prompt construction for post generation.

Builds the system and user messages sent to the text-generation service
for one platform/language variant.
"""

from typing import TYPE_CHECKING, Dict, List

from .vocabulary import TermCategory, banned_words

if TYPE_CHECKING:
    from .pipeline import GenerationRequest

PLATFORM_NAMES = {"linkedin": "LinkedIn", "x": "X (Twitter)"}

_SYSTEM_EN = """You are a tool that restructures developer technical logs into {platform} posts.

Core principles:
1. No exaggeration. No marketing tone.
2. No emojis.
3. Use only user-provided information. Do not invent results.
4. Trust over polish: accuracy first. Never make claims without evidence.
5. Follow the STAR framework: Situation and Action from the raw log, Task inferred from context, Result is the user-provided outcome verbatim.
6. When evidence is provided, quote it exactly as given, marked with "[Evidence]". Preserve all numbers, units and phrasing.
7. {format_rule}

Banned words: {words}
Banned emojis: {emojis}"""

_SYSTEM_KO = """당신은 개발자의 기술 로그를 {platform} 포스트로 재구성하는 도구입니다.

핵심 원칙:
1. 과장하지 않습니다. 마케팅 톤을 사용하지 않습니다.
2. 이모지를 사용하지 않습니다.
3. 사용자가 제공한 정보만 사용합니다. 결과를 만들어내지 않습니다.
4. Trust over polish: 정확성이 우선이며, 증거 없는 주장은 하지 않습니다.
5. STAR 프레임워크: 상황과 행동은 로그에서, 과제는 문맥에서 추론하고, 결과는 사용자가 제공한 outcome을 그대로 사용합니다.
6. 증거가 제공되면 "[Evidence]" 라벨과 함께 원문 그대로 인용합니다. 숫자, 단위, 표현을 정확히 보존합니다.
7. {format_rule}

금지된 단어: {words}
금지된 이모지: {emojis}"""

_FORMAT_RULES = {
    ("en", "linkedin"): "LinkedIn format: professional but accessible tone, 1-3 short paragraphs.",
    ("en", "x"): "X format: concise and direct, 280 characters or a short thread.",
    ("ko", "linkedin"): "LinkedIn 포맷: 전문적이지만 접근 가능한 톤. 1-3개의 짧은 문단.",
    ("ko", "x"): "X 포맷: 간결하고 직접적. 280자 제한 또는 짧은 스레드.",
}

_NO_EVIDENCE = {
    "en": (
        "IMPORTANT: No evidence provided. Do NOT include numeric claims "
        "(e.g. \"50% improvement\", \"3x faster\"), performance claims "
        "(e.g. \"significantly faster\", \"much better\") or quantitative "
        "comparisons. Use only qualitative descriptions."
    ),
    "ko": (
        "중요: 증거가 제공되지 않았습니다. 숫자 클레임(예: \"50% 개선\", \"3배 향상\"), "
        "성능 주장(예: \"훨씬 빠른\", \"크게 개선된\"), 정량적 비교를 포함하지 마세요. "
        "정성적 설명만 사용하세요."
    ),
}


def build_system_prompt(language: str, platform: str) -> str:
    words = banned_words(TermCategory.EN) + banned_words(TermCategory.KO)
    if language == "ko":
        words = banned_words(TermCategory.KO) + banned_words(TermCategory.EN)
    template = _SYSTEM_KO if language == "ko" else _SYSTEM_EN
    return template.format(
        platform=PLATFORM_NAMES[platform],
        format_rule=_FORMAT_RULES[(language, platform)],
        words=", ".join(words),
        emojis=" ".join(banned_words(TermCategory.EMOJI)),
    )


def build_user_prompt(request: "GenerationRequest", language: str) -> str:
    platform = request.platform.value
    has_evidence = bool(request.evidence_before or request.evidence_after)

    parts = [
        f"Raw Log:\n{request.raw_log}",
        f"\nOutcome (use exactly as written):\n{request.outcome}",
    ]
    if request.evidence_before:
        parts.append(f"\nEvidence Before (quote verbatim, do NOT paraphrase):\n{request.evidence_before}")
    if request.evidence_after:
        parts.append(f"\nEvidence After (quote verbatim, do NOT paraphrase):\n{request.evidence_after}")
    if request.human_insight:
        parts.append(f"\nHuman Insight:\n{request.human_insight}")

    name = "LinkedIn" if platform == "linkedin" else "X"
    if language == "ko":
        instruction = f"\n위 정보를 바탕으로 {name} 포스트를 작성하세요. outcome을 그대로 사용하고, 결과를 만들어내지 마세요."
        if has_evidence:
            instruction += " 제공된 증거는 원문 그대로 \"[Evidence]\" 라벨과 함께 인용하세요."
    else:
        instruction = f"\nBased on the above information, write a {name} post. Use the outcome verbatim and do not invent results."
        if has_evidence:
            instruction += " Quote any provided evidence exactly as given, marked with \"[Evidence]\"."
    parts.append(instruction)

    if not has_evidence:
        parts.append("\n" + _NO_EVIDENCE[language])

    if platform == "x":
        parts.append(
            "\n280자 제한을 지켜주세요." if language == "ko"
            else "\nKeep it under 280 characters. If needed, format as a short thread."
        )

    return "\n".join(parts)


def build_messages(request: "GenerationRequest", language: str) -> List[Dict[str, str]]:
    """Role-tagged messages for one platform/language variant."""
    return [
        {"role": "system", "content": build_system_prompt(language, request.platform.value)},
        {"role": "user", "content": build_user_prompt(request, language)},
    ]
