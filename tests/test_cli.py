import json

import yaml

from fenquote.__main__ import main


QUOTE = {
    "id": "Q-CLI",
    "items": [
        {
            "id": "w1",
            "type": "window",
            "width": 1.2,
            "height": 1.5,
            "system": "Sliding",
            "leaves": 2,
            "glassType": "double",
            "profile": {"frame_price": 100, "sach_price": 80, "glass_price_double": 120, "base_profit_rate": 0.3},
        }
    ],
    "settings": {"discountPercentage": 0},
}


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_presets(capsys):
    assert main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "Standard Office" in out
    assert "Retail Front" in out


def test_grid_json(capsys):
    assert main(["grid", "--width", "4", "--height", "3", "--columns", "2", "--rows", "2", "--json"]) == 0
    design = json.loads(capsys.readouterr().out)
    assert design["frameMeters"] == 14.0
    assert len(design["panels"]) == 4


def test_grid_with_preset(capsys):
    assert main(["grid", "--width", "3", "--height", "4", "--preset", "Residential"]) == 0
    out = capsys.readouterr().out
    assert "Grid: 3x4" in out
    assert "Glass area:    3.00 m2" in out


def test_grid_unknown_preset(capsys):
    assert main(["grid", "--width", "3", "--height", "4", "--preset", "Warehouse"]) == 1
    assert "Layout failed" in capsys.readouterr().out


def test_price_json(tmp_path, capsys):
    path = tmp_path / "quote.json"
    path.write_text(json.dumps(QUOTE))

    assert main(["price", str(path), "--json"]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["totals"]["total_price"] == 2051.4
    assert result["items"][0]["frame_length"] == 6.9


def test_price_yaml_report(tmp_path, capsys):
    path = tmp_path / "quote.yaml"
    path.write_text(yaml.safe_dump(QUOTE))

    assert main(["price", str(path)]) == 0
    out = capsys.readouterr().out
    assert "Quote Q-CLI" in out
    assert "2,051.40" in out


def test_price_missing_file(tmp_path, capsys):
    assert main(["price", str(tmp_path / "nope.json")]) == 1
    assert "Input not found" in capsys.readouterr().out


def test_price_invalid_quote(tmp_path, capsys):
    bad = dict(QUOTE, items=[dict(QUOTE["items"][0], width=-1)])
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(bad))

    assert main(["price", str(path)]) == 1
    assert "Invalid quote" in capsys.readouterr().out
