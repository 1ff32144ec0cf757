# tokenizer.py

import re
from typing import List, Optional

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3

# Contractions are listed without apostrophes because punctuation is removed
# before stop-word matching ("don't" -> "dont"). Forms that collapse into real
# content words ("she'll" -> "shell") are left out.
_CONTRACTION_COLLISIONS = frozenset(["hell", "ill", "lets", "shed", "shell", "wed", "well"])

STOP_WORDS = frozenset(
    word.replace("'", "")
    for word in (
        "a about above after again against all am an and any are aren't as at "
        "be because been before being below between both but by "
        "can't cannot could couldn't "
        "did didn't do does doesn't doing don't down during "
        "each few for from further "
        "had hadn't has hasn't have haven't having he he'd he'll he's her here "
        "here's hers herself him himself his how how's "
        "i i'd i'll i'm i've if in into is isn't it it's its itself let's "
        "me more most mustn't my myself no nor not "
        "of off on once only or other ought our ours ourselves out over own "
        "same shan't she she'd she'll she's should shouldn't so some such "
        "than that that's the their theirs them themselves then there there's "
        "these they they'd they'll they're they've this those through to too "
        "under until up very "
        "was wasn't we we'd we'll we're we've were weren't what what's when "
        "when's where where's which while who who's whom why why's with won't "
        "would wouldn't you you'd you'll you're you've your yours yourself yourselves"
    ).split()
) - _CONTRACTION_COLLISIONS


def tokenize(text: Optional[str]) -> List[str]:
    """
    Lowercases text, removes punctuation and returns the remaining words
    that are longer than two characters and not stop words.
    Repeated words are kept; counting them is up to the caller.
    """
    if not text:
        return []
    cleaned = _NON_WORD_RE.sub("", text.lower())
    return [
        word for word in _WHITESPACE_RE.split(cleaned)
        if len(word) >= MIN_TOKEN_LENGTH and word not in STOP_WORDS
    ]
