"""
Banned hype vocabulary.

Marketing and hype terms that must not appear in generated posts, in
English, Korean and as pictographic symbols. Each entry records why it is
banned so the list can be reviewed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class TermCategory(Enum):
    EN = "en"
    KO = "ko"
    EMOJI = "emoji"


@dataclass(frozen=True)
class BannedTerm:
    word: str
    category: TermCategory
    rationale: str


def _terms(category: TermCategory, rows: List[Tuple[str, str]]) -> List[BannedTerm]:
    return [BannedTerm(word, category, rationale) for word, rationale in rows]


BANNED_TERMS: List[BannedTerm] = (
    _terms(TermCategory.EN, [
        ("game-changer", "Overused startup buzzword that exaggerates impact"),
        ("game changer", "Variant of game-changer without hyphen"),
        ("revolutionary", "Implies unprecedented change; rarely accurate for dev work"),
        ("cutting-edge", "Marketing jargon implying superiority without evidence"),
        ("cutting edge", "Variant without hyphen"),
        ("innovative", "Vague superlative; real innovation should be self-evident"),
        ("disruptive", "Buzzword that overstates significance"),
        ("next-level", "Informal hype term with no measurable meaning"),
        ("next level", "Variant without hyphen"),
        ("amazing", "Subjective emotional language; not factual"),
        ("incredible", "Literally means 'not credible'; undermines trust"),
        ("awesome", "Casual superlative inappropriate for professional content"),
        ("groundbreaking", "Implies historic significance; almost always an overstatement"),
        ("world-class", "Unverifiable comparative claim"),
        ("best-in-class", "Marketing superlative without evidence"),
        ("state-of-the-art", "Vague claim of technological superiority"),
        ("bleeding-edge", "Exaggerated variant of cutting-edge"),
        ("mind-blowing", "Hyperbolic emotional language"),
        ("unbelievable", "Literally undermines credibility of claims"),
        ("unprecedented", "Almost never literally true; exaggerates novelty"),
        ("supercharge", "Marketing verb implying extreme amplification"),
        ("turbocharge", "Marketing verb implying extreme amplification"),
        ("skyrocket", "Exaggerates growth or improvement"),
        ("unleash", "Dramatic marketing verb; not appropriate for tech logs"),
        ("unlock", "Marketing metaphor implying hidden potential"),
        ("empower", "Corporate buzzword that adds no factual meaning"),
        ("leverage", "Overused business jargon; prefer 'use' or 'apply'"),
        ("synergy", "Classic corporate buzzword with vague meaning"),
        ("paradigm shift", "Overused buzzword that exaggerates impact of changes"),
        ("rocket ship", "Startup hype metaphor for rapid growth"),
        ("10x", "Startup culture hype term unless backed by data"),
        ("magical", "Subjective and non-technical descriptor"),
        ("insane", "Informal hyperbole inappropriate for professional tone"),
        ("crushing it", "Informal hype expression"),
        ("killing it", "Informal hype expression"),
        ("absolutely", "Intensifier that inflates claims unnecessarily"),
        ("extremely", "Vague intensifier; prefer concrete measurements"),
    ])
    + _terms(TermCategory.KO, [
        ("혁신적", "'innovative'; vague superlative"),
        ("획기적", "'groundbreaking'; overstates significance"),
        ("놀라운", "'amazing'; emotional language"),
        ("압도적", "'overwhelming'; exaggerates degree"),
        ("최고의", "'the best'; unverifiable superlative"),
        ("최첨단", "'cutting-edge'"),
        ("파괴적", "'disruptive'; buzzword"),
        ("미친", "'crazy/insane'; informal hype slang"),
        ("대박", "'jackpot'; casual exclamation"),
        ("엄청난", "'tremendous'; vague intensifier"),
        ("충격적", "'shocking'; sensationalist language"),
        ("경이로운", "'marvelous'; exaggerated admiration"),
        ("폭발적", "'explosive'; exaggerates growth or impact"),
        ("게임체인저", "Transliteration of 'game-changer'"),
        ("넥스트레벨", "Transliteration of 'next-level'"),
        ("완전", "'totally' used as an informal intensifier"),
        ("진짜", "'really' as informal emphasis; too casual"),
        ("레전드", "Transliteration of 'legend'; hype slang"),
        ("미쳤다", "'that's crazy'; informal hype expression"),
        ("역대급", "'all-time best'; exaggerated comparison"),
        ("쩐다", "Slang for 'amazing'; too informal"),
        ("핵", "Slang intensifier prefix"),
        ("갓", "Slang hype prefix"),
    ])
    + _terms(TermCategory.EMOJI, [
        ("🚀", "Rocket; startup hype symbol"),
        ("🔥", "Fire; implies something is trending"),
        ("💥", "Explosion; sensationalist emphasis"),
        ("⚡", "Lightning; speed/power hype"),
        ("✨", "Sparkles; implies magical quality"),
        ("💪", "Muscle; informal motivation"),
        ("🎯", "Target; overused in marketing content"),
        ("💡", "Lightbulb; 'insight' cliché"),
        ("🏆", "Trophy; implies superiority"),
        ("🎉", "Party; too casual"),
        ("👏", "Clap; informal praise"),
        ("❤️", "Heart; emotional rather than factual"),
        ("😍", "Heart-eyes; excessive enthusiasm"),
        ("🤯", "Mind-blown; sensationalist reaction"),
        ("💯", "Hundred; slang emphasis"),
        ("👀", "Eyes; clickbait attention-grabbing"),
        ("🙌", "Raised hands; informal celebration"),
        ("⭐", "Star; implies superior quality"),
        ("🌟", "Glowing star; hype emphasis"),
        ("💰", "Money bag; financial hype"),
    ])
)


def banned_words(category: Optional[TermCategory] = None) -> List[str]:
    """Return banned words, optionally restricted to one category."""
    return [t.word for t in BANNED_TERMS if category is None or t.category == category]
