"""
Order-independent digest of a submission, kept alongside stored results.

The digest is a 32-bit polynomial hash rendered in base 36. It is a hint for
audit and duplicate detection only: distinct games can collide, so equal
fingerprints never prove two games were identical.
"""

import orjson

from ..models.score import ScoreSubmission

DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def canonical_form(submission: ScoreSubmission) -> str:
    """Compact JSON of the fingerprinted fields with cards in sorted order"""
    return orjson.dumps({
        'player_name': submission.player_name,
        'score': submission.score,
        'rounds': submission.rounds,
        'final_progress': submission.final_progress,
        'final_bugs': submission.final_bugs,
        'final_tech_debt': submission.final_tech_debt,
        'cards_played': sorted(submission.cards_played),
    }).decode('utf-8')


def hash_string(text: str) -> str:
    """Signed 32-bit ``h * 31 + unit`` over UTF-16 code units, absolute value in base 36"""
    data = text.encode('utf-16-le')
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return to_base36(abs(h))


def to_base36(value: int) -> str:
    if value == 0:
        return '0'
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(DIGITS[rem])
    return ''.join(reversed(out))


def fingerprint(submission: ScoreSubmission) -> str:
    return hash_string(canonical_form(submission))
