"""
Author Alias Tables
===================

Static lookup data for author resolution.

AUTHOR_ALIASES maps a lowercase, accent-free name variant to the
canonical display name stored in the corpus `author` column.
CANDIDATE_AUTHORS is the ordered list scanned when detecting an author
mentioned in free text; multi-word and longer names come first so that
"Le Bon" wins over shorter names it contains.
"""

from types import MappingProxyType
from typing import Dict, Tuple


_CANONICAL_VARIANTS: Dict[str, Tuple[str, ...]] = {
    "Kuczynski": (
        "kuczynski", "john-michael kuczynski", "john michael kuczynski",
        "j-m kuczynski", "j.-m. kuczynski", "j.m. kuczynski", "j. m. kuczynski",
        "jm kuczynski", "jmk",
    ),
    "Russell": ("russell", "bertrand russell"),
    "Galileo": ("galileo", "galileo galilei"),
    "Nietzsche": ("nietzsche", "friedrich nietzsche"),
    "Freud": ("freud", "sigmund freud"),
    "James": ("james", "william james"),
    "Leibniz": ("leibniz", "gottfried leibniz", "gottfried wilhelm leibniz"),
    "Aristotle": ("aristotle",),
    "Le Bon": ("le bon", "gustave le bon", "lebon"),
    "Plato": ("plato",),
    "Darwin": ("darwin", "charles darwin"),
    "Kant": ("kant", "immanuel kant"),
    "Schopenhauer": ("schopenhauer", "arthur schopenhauer"),
    "Jung": ("jung", "carl jung", "c.g. jung", "c. g. jung", "carl gustav jung"),
    "Poe": ("poe", "edgar allan poe", "edgar poe"),
    "Marx": ("marx", "karl marx"),
    "Keynes": ("keynes", "john maynard keynes"),
    "Locke": ("locke", "john locke"),
    "Newton": ("newton", "isaac newton"),
    "Hume": ("hume", "david hume"),
    "Machiavelli": ("machiavelli", "niccolo machiavelli"),
    "Bierce": ("bierce", "ambrose bierce"),
    "Poincare": ("poincare", "henri poincare"),
    "Bergson": ("bergson", "henri bergson"),
    "London": ("london", "jack london"),
    "Adler": ("adler", "alfred adler"),
    "Engels": ("engels", "friedrich engels"),
    "Rousseau": ("rousseau", "jean-jacques rousseau", "jean jacques rousseau"),
    "Mises": ("mises", "von mises", "ludwig von mises"),
    "Veblen": ("veblen", "thorstein veblen"),
    "Swett": ("swett", "sophia swett"),
    "Berkeley": ("berkeley", "george berkeley"),
    "Maimonides": ("maimonides", "moses maimonides", "rambam"),
    "Descartes": ("descartes", "rene descartes"),
    "Spinoza": ("spinoza", "baruch spinoza"),
    "Hegel": ("hegel", "georg wilhelm friedrich hegel", "g.w.f. hegel"),
    "Dewey": ("dewey", "john dewey"),
    "Mill": ("mill", "john stuart mill", "j.s. mill"),
    "Hobbes": ("hobbes", "thomas hobbes"),
    "Smith": ("adam smith",),
}


AUTHOR_ALIASES = MappingProxyType({
    variant: canonical
    for canonical, variants in _CANONICAL_VARIANTS.items()
    for variant in variants
})


CANDIDATE_AUTHORS: Tuple[str, ...] = (
    "Le Bon",
    "Schopenhauer",
    "Machiavelli",
    "Maimonides",
    "Kuczynski",
    "Nietzsche",
    "Aristotle",
    "Descartes",
    "Rousseau",
    "Poincare",
    "Berkeley",
    "Spinoza",
    "Galileo",
    "Leibniz",
    "Bergson",
    "Russell",
    "Darwin",
    "Newton",
    "Engels",
    "Veblen",
    "Keynes",
    "Bierce",
    "London",
    "Hobbes",
    "Freud",
    "Plato",
    "Locke",
    "Adler",
    "Mises",
    "Swett",
    "Hegel",
    "Dewey",
    "James",
    "Marx",
    "Kant",
    "Hume",
    "Jung",
    "Poe",
)
