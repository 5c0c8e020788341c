"""
Canonicalize medication mentions

Purpose: turn free-text medication names into the lowercase, alias-resolved keys used by the rule
overlay and the rulebook, and expand a pill type into its hormonal ingredients.

Input: raw user strings, e.g. "  Advil ", "Rifampicin"

Output: normalized names, e.g. "ibuprofen", "rifampin"

Example: normalize_drug_name("Motrin") → "ibuprofen"; pill_components("combined") →
["ethinyl estradiol", "levonorgestrel"]

Notes: the alias table maps brands/misspellings straight onto a canonical name that is never itself
an alias, so normalizing twice gives the same answer as normalizing once.
"""
from typing import Dict, Iterable, List, Mapping

ALIASES: Dict[str, str] = {
    "advil": "ibuprofen",
    "motrin": "ibuprofen",
    "ibuprofine": "ibuprofen",
    "rifampicin": "rifampin",
    "rifadin": "rifampin",
    "ferrous sulphate": "ferrous sulfate",
    "st johns wort": "st. john's wort",
    "st. johns wort": "st. john's wort",
    "st john's wort": "st. john's wort",
    "saint john's wort": "st. john's wort",
    "tylenol": "acetaminophen",
    "paracetamol": "acetaminophen",
    "topamax": "topiramate",
    "tegretol": "carbamazepine",
    "dilantin": "phenytoin",
}

PILL_INGREDIENTS: Dict[str, List[str]] = {
    "combined": ["ethinyl estradiol", "levonorgestrel"],
    "progestin_only": ["norethindrone"],
}

PILL_LABELS: Dict[str, str] = {
    "combined": "Combined pill",
    "progestin_only": "Progestin-only pill",
}

DEFAULT_PILL_TYPE = "combined"


def normalize_drug_name(name, aliases: Mapping[str, str] = ALIASES) -> str:
    s = " ".join(str(name if name is not None else "").split()).lower()
    return aliases.get(s, s)


def readable(name: str) -> str:
    """'ethinyl estradiol' → 'Ethinyl Estradiol' (first letter of each word upper-cased, rest untouched)."""
    return " ".join(w[:1].upper() + w[1:] for w in str(name).split(" ") if w)


def clean_med_list(meds: Iterable[str], limit: int = None) -> List[str]:
    out: List[str] = []
    seen = set()
    for raw in meds or []:
        s = str(raw).strip()
        if not s or s.lower() in seen:
            continue
        seen.add(s.lower())
        out.append(s)
    return out[:limit] if limit else out


def pill_components(pill_type: str) -> List[str]:
    key = (pill_type or "").strip().lower()
    return list(PILL_INGREDIENTS.get(key, PILL_INGREDIENTS[DEFAULT_PILL_TYPE]))


def pill_label(pill_type: str) -> str:
    key = (pill_type or "").strip().lower()
    return PILL_LABELS.get(key, PILL_LABELS[DEFAULT_PILL_TYPE])
