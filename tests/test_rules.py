from pathlib import Path

import pytest

from fenquote.pricing import PricingRules, load_pricing_rules


def test_shipped_rules_match_defaults():
    assert load_pricing_rules() == PricingRules()


def test_rule_files_ship_inside_package():
    import fenquote
    from fenquote.curtain_wall.presets import DEFAULT_PRESETS_PATH
    from fenquote.pricing.rules import DEFAULT_RULES_PATH

    package_dir = Path(fenquote.__file__).parent
    for path in (DEFAULT_RULES_PATH, DEFAULT_PRESETS_PATH):
        assert path.is_file()
        assert package_dir in path.parents


def test_missing_file_gives_defaults(tmp_path):
    assert load_pricing_rules(tmp_path / "absent.yaml") == PricingRules()


def test_overrides_and_unknown_keys(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("tilt_turn_leaf_price: 2500\nlarge_area_uplift_enabled: true\nvat: 0.14\n")

    rules = load_pricing_rules(path)
    assert rules.tilt_turn_leaf_price == 2500
    assert rules.large_area_uplift_enabled is True
    assert rules.down_payment_share == 0.80


def test_non_mapping_file_gives_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("- 1\n- 2\n")
    assert load_pricing_rules(path) == PricingRules()


def test_broken_yaml_gives_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("tilt_turn_leaf_price: [1, 2\n")
    assert load_pricing_rules(path) == PricingRules()


def test_payment_shares_must_sum_to_one(tmp_path):
    with pytest.raises(ValueError):
        PricingRules(down_payment_share=0.7)

    path = tmp_path / "rules.yaml"
    path.write_text("supply_payment_share: 0.3\n")
    with pytest.raises(ValueError):
        load_pricing_rules(path)
