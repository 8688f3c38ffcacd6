"""
Quote Extraction Vocabulary
===========================

Fixed tables used by the quote pipeline. Everything here is read-only
and built once at import.
"""

from types import MappingProxyType

# Tokens (lowercase, without the final period) after which a period does
# not end a sentence.
ABBREVIATIONS = frozenset({
    "dr", "mr", "mrs", "ms", "prof", "jr", "sr", "vs", "etc",
    "i.e", "e.g", "cf", "viz", "ibid", "op", "loc",
    "p", "pp", "vol", "ch", "sec", "fig",
})

# OCR misreads of common words: doubled v for w, merged letters.
# Keys are lowercase whole words; capitalization is preserved on output.
OCR_SUBSTITUTIONS = MappingProxyType({
    "vvith": "with",
    "vvhich": "which",
    "vvhat": "what",
    "vvhen": "when",
    "vvhere": "where",
    "vvho": "who",
    "vvhy": "why",
    "vvas": "was",
    "vvere": "were",
    "vvill": "will",
    "vvould": "would",
    "vvorld": "world",
    "vvay": "way",
    "vve": "we",
    "hovv": "how",
    "novv": "now",
    "knovv": "know",
    "shovv": "show",
    "tbe": "the",
    "tlie": "the",
    "tbat": "that",
    "tliat": "that",
    "tbis": "this",
    "tliis": "this",
    "tbey": "they",
    "tben": "then",
    "tbere": "there",
    "wbich": "which",
    "wliich": "which",
    "wben": "when",
    "wbat": "what",
    "witb": "with",
    "aud": "and",
})

# Contractions that lost their apostrophe. Words that are also real
# words without one ("cant", "wont", "well", "hell") are not listed.
CONTRACTIONS = MappingProxyType({
    "dont": "don't",
    "doesnt": "doesn't",
    "didnt": "didn't",
    "isnt": "isn't",
    "wasnt": "wasn't",
    "arent": "aren't",
    "werent": "weren't",
    "hasnt": "hasn't",
    "havent": "haven't",
    "hadnt": "hadn't",
    "couldnt": "couldn't",
    "wouldnt": "wouldn't",
    "shouldnt": "shouldn't",
    "mustnt": "mustn't",
    "neednt": "needn't",
    "thats": "that's",
    "theres": "there's",
    "youre": "you're",
    "theyre": "they're",
    "weve": "we've",
    "theyve": "they've",
    "youve": "you've",
    "itll": "it'll",
})

PHILOSOPHICAL_KEYWORDS = (
    "mind", "consciousness", "knowledge", "truth", "reason", "belief",
    "meaning", "logic", "existence", "reality", "experience", "perception",
    "thought", "language", "moral", "ethics", "freedom", "will",
    "nature", "causation", "necessity", "identity", "concept", "judgment",
    "inference", "intellect", "virtue", "soul", "desire", "psychology",
    "society", "power", "value", "metaphysics", "epistemology", "philosophy",
)

MARKUP_RESIDUE = (
    "<div", "</", "<br", "<p>", "&nbsp;", "&amp;", "&lt;", "&gt;", "&quot;",
    "{{", "}}", "[edit]", "[citation needed]", "\\begin", "\\end", "\\cite",
    "```", "http://", "https://", "www.",
)

ARTIFACT_CHARACTERS = frozenset("<>{}|\\")

CLOSING_QUOTES = frozenset("\"'”’")

TERMINAL_MARKS = frozenset(".!?")
