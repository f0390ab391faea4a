# app/wordlists.py
# Static pattern lists for the moderation gate. Patterns are matched
# case-insensitively; keep them anchored on word boundaries.

HARD_BAN_PATTERNS = (
    # explicit / sexual
    r"\bporn\w*\b",
    r"\bnude(s)?\b",
    r"\bsex\s*(tape|video|chat)s?\b",
    r"\bsexy\b",
    r"\berotic\b",
    r"\bhorny\b",
    r"\bonlyfans\b",
    # self-harm
    r"\bkill\s+(my|your)self\b",
    r"\bkys\b",
    r"\bsuicid\w*\b",
    r"\bself[-\s]?harm\w*\b",
    r"\bcut(ting)?\s+myself\b",
    r"\bwant\s+to\s+die\b",
    # graphic violence
    r"\bbehead\w*\b",
    r"\bdismember\w*\b",
    r"\bdecapitat\w*\b",
    r"\bgore\b",
    r"\bmutilat\w*\b",
    r"\bshoot\s+up\s+(the|a|my)\s+school\b",
)

PROFANITY_PATTERNS = (
    r"\bf+u+c+k+\w*\b",
    r"\bsh+i+t+\w*\b",
    r"\bbitch\w*\b",
    r"\bbastard\w*\b",
    r"\basshole\w*\b",
    r"\bdick(head)?s?\b",
    r"\bcunt\w*\b",
    r"\bwhore\w*\b",
    r"\bslut\w*\b",
    r"\bretard(ed)?\b",
    r"\bwtf\b",
    r"\bstfu\b",
)
