from models import RULE_SOURCE
from rules_engine import INDUCTION_NOTE, RuleOverlay
from severity import SeverityLevel


def test_inducer_with_hormonal_components_emits_cartesian_product():
    records = RuleOverlay().apply(["ethinyl estradiol", "levonorgestrel"], ["rifampin", "carbamazepine"])

    pairs = [(r.drug_a, r.drug_b) for r in records]
    assert pairs == [
        ("Rifampin", "Ethinyl Estradiol"),
        ("Rifampin", "Levonorgestrel"),
        ("Carbamazepine", "Ethinyl Estradiol"),
        ("Carbamazepine", "Levonorgestrel"),
    ]
    assert all(r.level is SeverityLevel.high for r in records)
    assert all(r.source == RULE_SOURCE for r in records)
    assert all(r.description == INDUCTION_NOTE for r in records)


def test_matches_raw_or_normalized_names():
    overlay = RuleOverlay()
    assert overlay.apply(["norethindrone"], ["  rifampicin "])[0].drug_a == "Rifampicin"
    assert overlay.apply(["norethindrone"], ["Tegretol"])[0].drug_a == "Tegretol"


def test_no_inducer_contributes_nothing():
    assert RuleOverlay().apply(["ethinyl estradiol"], ["ibuprofen", "metformin"]) == []


def test_no_hormonal_component_contributes_nothing():
    assert RuleOverlay().apply(["placebo"], ["rifampin"]) == []
    assert RuleOverlay().apply([], ["rifampin"]) == []


def test_reference_sets_are_injectable():
    overlay = RuleOverlay(hormonal=["estradiol valerate"], inducers=["modafinil"])
    records = overlay.apply(["Estradiol Valerate"], ["modafinil", "rifampin"])
    assert [(r.drug_a, r.drug_b) for r in records] == [("Modafinil", "Estradiol Valerate")]


def test_duplicate_meds_do_not_duplicate_records():
    records = RuleOverlay().apply(["levonorgestrel"], ["rifampin", "Rifampin"])
    assert len(records) == 1


def test_brand_and_generic_of_same_inducer_keep_first_spelling():
    records = RuleOverlay().apply(["levonorgestrel"], ["Rifadin", "rifampin"])
    assert [(r.drug_a, r.drug_b) for r in records] == [("Rifadin", "Levonorgestrel")]
