import warnings

import pytest

from fenquote.curtain_wall import (
    CurtainWallDesigner,
    CurtainWallGrid,
    GeometryInconsistency,
    apply_preset,
    compute_aggregates,
    find_coverage_issues,
    generate_grid,
    load_presets,
    run_curtain_wall_layout,
)
from fenquote.models import PanelType


def test_generate_uniform_grid(grid_2x2):
    assert len(grid_2x2.panels) == 4
    assert all(p.type == PanelType.STRUCTURE for p in grid_2x2.panels)
    assert grid_2x2.column_sizes == [2.0, 2.0]
    assert grid_2x2.row_sizes == [1.5, 1.5]
    assert [p.id for p in grid_2x2.panels] == ["panel-0", "panel-1", "panel-2", "panel-3"]
    bottom_right = grid_2x2.get("panel-3")
    assert (bottom_right.row, bottom_right.col) == (1, 1)
    assert bottom_right.left == pytest.approx(2.0)
    assert bottom_right.top == pytest.approx(1.5)
    assert grid_2x2.warnings == []


def test_generate_with_custom_sizes():
    grid = generate_grid(3, 1, 5.0, 2.0, column_sizes=[1.0, 3.0, 1.0])
    assert [p.width for p in grid.panels] == [1.0, 3.0, 1.0]
    assert [p.left for p in grid.panels] == pytest.approx([0.0, 1.0, 4.0])
    assert grid.warnings == []


def test_generate_rejects_empty_shape():
    with pytest.raises(ValueError):
        generate_grid(0, 2, 4.0, 3.0)


def test_two_window_aggregates(grid_2x2):
    grid_2x2.set_panel_type(["panel-0", "panel-1"], "window")
    agg = grid_2x2.compute_aggregates()

    assert agg.frame_meters == pytest.approx(14.0)
    assert agg.corner_count == 4
    assert agg.glass_area == pytest.approx(6.0)
    assert agg.window_meters == pytest.approx(14.0)
    assert agg.num_windows == 2
    assert agg.num_doors == 0
    assert agg.total_panel_area == pytest.approx(12.0)


def test_frame_meters_ignore_internal_layout():
    coarse = generate_grid(1, 1, 4.0, 3.0).compute_aggregates()
    fine = generate_grid(5, 4, 4.0, 3.0).compute_aggregates()
    assert coarse.frame_meters == fine.frame_meters == pytest.approx(14.0)
    assert coarse.corner_count == fine.corner_count == 4


def test_corner_and_mullion_panels_are_not_openings(grid_2x2):
    grid_2x2.set_panel_type(["panel-0"], PanelType.CORNER)
    grid_2x2.set_panel_type(["panel-1"], PanelType.MULLION)
    grid_2x2.set_panel_type(["panel-2"], PanelType.DOOR)
    agg = grid_2x2.compute_aggregates()
    assert agg.num_doors == 1
    assert agg.num_windows == 0
    assert agg.glass_area == pytest.approx(3.0)


def test_reshape_discards_customization():
    grid = generate_grid(3, 3, 6.0, 3.0)
    grid.set_panel_type(["panel-0", "panel-4"], "door")
    grid.merge_panels(["panel-1", "panel-2"])

    grid.reshape(columns=4)

    assert grid.columns == 4
    assert len(grid.panels) == 12
    assert all(p.type == PanelType.STRUCTURE for p in grid.panels)
    assert all(p.merged_id is None for p in grid.panels)
    assert grid.column_sizes == pytest.approx([1.5] * 4)


def test_reshape_rows_keeps_custom_column_sizes():
    grid = generate_grid(2, 2, 4.0, 3.0, column_sizes=[1.0, 3.0])
    grid.reshape(rows=3)
    assert grid.column_sizes == [1.0, 3.0]
    assert grid.row_sizes == pytest.approx([1.0, 1.0, 1.0])


@pytest.mark.parametrize("shape", [{"columns": 0}, {"rows": 0}, {"columns": 2, "rows": -1}])
def test_rejected_reshape_leaves_grid_unchanged(shape):
    grid = generate_grid(3, 3, 6.0, 3.0)
    grid.set_panel_type(["panel-4"], "window")
    grid.merge_panels(["panel-0", "panel-1"])
    before = grid.snapshot()

    with pytest.raises(ValueError):
        grid.reshape(**shape)

    assert grid.snapshot() == before
    assert (grid.columns, grid.rows) == (3, 3)
    grid.resize_row(0, 1.0)
    assert grid.row_sizes == pytest.approx([1.0, 1.0, 1.0])


def test_set_panel_type_keeps_merge(grid_2x2):
    group = grid_2x2.merge_panels(["panel-0", "panel-1"])
    changed = grid_2x2.set_panel_type(["panel-0", "panel-1", "missing"], "window")
    assert changed == 2
    assert grid_2x2.get("panel-0").merged_id == group
    assert grid_2x2.get("panel-0").col_span == 1


def test_merge_needs_two_panels(grid_2x2):
    assert grid_2x2.merge_panels(["panel-0"]) is None
    assert grid_2x2.merge_panels(["panel-0", "nope"]) is None
    assert grid_2x2.merge_groups() == {}


def test_merge_assigns_shared_id_and_keeps_cells(grid_2x2):
    group = grid_2x2.merge_panels({"panel-0", "panel-2"})
    assert group == "merged-1"
    members = grid_2x2.merge_groups()[group]
    assert sorted(p.id for p in members) == ["panel-0", "panel-2"]
    assert all((p.width, p.height) == (2.0, 1.5) for p in members)
    assert grid_2x2.group_bounds(group) == (0, 0, 1, 0)

    second = grid_2x2.merge_panels(["panel-1", "panel-3"])
    assert second == "merged-2"


def test_merge_conserves_glass_area(grid_2x2):
    grid_2x2.set_panel_type(["panel-0", "panel-1"], "window")
    before = grid_2x2.compute_aggregates()
    grid_2x2.merge_panels(["panel-0", "panel-1"])
    after = grid_2x2.compute_aggregates()

    assert after.glass_area == before.glass_area
    assert after.window_meters == before.window_meters


def test_merged_group_uses_member_perimeters_not_bounding_box(grid_2x2):
    grid_2x2.set_panel_type(["panel-0", "panel-1"], "window")
    grid_2x2.merge_panels(["panel-0", "panel-1"])
    agg = grid_2x2.compute_aggregates()

    # two 2.0 x 1.5 cells: 2 * 7.0, not the 4.0 x 1.5 bounding perimeter of 11.0
    assert agg.window_meters == pytest.approx(14.0)


def test_split_all_keeps_types(grid_2x2):
    grid_2x2.set_panel_type(["panel-0", "panel-1"], "door")
    grid_2x2.merge_panels(["panel-0", "panel-1"])
    assert grid_2x2.split_all() == 2
    assert grid_2x2.merge_groups() == {}
    assert grid_2x2.get("panel-0").type == PanelType.DOOR


def test_size_mismatch_warns_but_computes():
    with pytest.warns(GeometryInconsistency):
        grid = generate_grid(2, 1, 4.0, 3.0, column_sizes=[1.5, 2.0])

    assert grid.warnings
    assert [p.width for p in grid.panels] == [1.5, 2.0]
    agg = grid.compute_aggregates()
    assert agg.frame_meters == pytest.approx(14.0)
    assert agg.warnings == grid.warnings


def test_short_size_table_pads_with_uniform():
    with pytest.warns(GeometryInconsistency):
        grid = generate_grid(3, 1, 3.0, 2.0, column_sizes=[1.0, 1.0])
    assert grid.column_sizes == [1.0, 1.0, 1.0]


def test_resize_column_redistributes_and_keeps_types():
    grid = generate_grid(4, 1, 4.0, 2.0)
    grid.set_panel_type(["panel-2"], "window")

    grid.resize_column(0, 1.6)

    assert grid.column_sizes[0] == pytest.approx(1.6)
    assert grid.column_sizes[1:] == pytest.approx([0.8, 0.8, 0.8])
    assert grid.get("panel-1").left == pytest.approx(1.6)
    assert grid.get("panel-2").type == PanelType.WINDOW
    assert grid.get("panel-2").width == pytest.approx(0.8)


def test_resize_row_clamps_value():
    grid = generate_grid(1, 2, 2.0, 3.0)
    grid.resize_row(1, 0.01)
    assert grid.row_sizes == pytest.approx([2.9, 0.1])
    with pytest.raises(ValueError):
        grid.resize_row(5, 1.0)


def test_reset_equal_sizes():
    grid = generate_grid(2, 2, 4.0, 3.0, column_sizes=[1.0, 3.0])
    grid.set_panel_type(["panel-1"], "window")
    grid.reset_equal_sizes()
    assert grid.column_sizes == [2.0, 2.0]
    assert grid.get("panel-1").width == 2.0
    assert grid.get("panel-1").type == PanelType.WINDOW


def test_compute_aggregates_does_not_mutate(grid_2x2):
    grid_2x2.set_panel_type(["panel-3"], "window")
    grid_2x2.merge_panels(["panel-2", "panel-3"])
    before = grid_2x2.snapshot()

    first = grid_2x2.compute_aggregates()
    second = grid_2x2.compute_aggregates()

    assert first == second
    assert grid_2x2.snapshot() == before


def test_design_data_reloads_into_same_layout(grid_2x2):
    grid_2x2.set_panel_type(["panel-0"], "door")
    grid_2x2.merge_panels(["panel-0", "panel-1"])
    data = grid_2x2.to_design_data()

    assert data["frameMeters"] == pytest.approx(14.0)
    assert data["panels"][0]["widthMeters"] == 2.0

    reloaded = CurtainWallGrid.from_design_data(data)
    assert reloaded.get("panel-0").type == PanelType.DOOR
    assert reloaded.get("panel-1").merged_id == "merged-1"
    assert reloaded.compute_aggregates() == grid_2x2.compute_aggregates()

    # new merges continue the sequence
    assert reloaded.merge_panels(["panel-2", "panel-3"]) == "merged-2"


def test_coverage_issues(grid_2x2):
    assert find_coverage_issues(grid_2x2.panels, 2, 2) == []
    issues = find_coverage_issues(grid_2x2.panels[:3], 2, 2)
    assert len(issues) == 1
    assert "not covered" in issues[0]


def test_compute_aggregates_accepts_plain_records():
    class Rec:
        def __init__(self, type, width, height):
            self.type, self.width, self.height = type, width, height

    agg = compute_aggregates([Rec("window", 1.0, 2.0), Rec("structure", 1.0, 2.0)], 2.0, 2.0)
    assert agg.glass_area == pytest.approx(2.0)
    assert agg.num_windows == 1


def test_presets_load_and_apply():
    presets = load_presets()
    assert {"Standard Office", "Retail Front", "Residential"} <= set(presets)

    grid = apply_preset(presets["Residential"], 3.0, 4.0)
    agg = grid.compute_aggregates()
    assert (grid.columns, grid.rows) == (3, 4)
    assert agg.num_windows == 2
    assert agg.num_doors == 1
    assert agg.glass_area == pytest.approx(3.0)


def test_presets_fall_back_on_bad_file(tmp_path):
    bad = tmp_path / "presets.yaml"
    bad.write_text("presets:\n  - description: no name\n")
    presets = load_presets(bad)
    assert "Standard Office" in presets


def test_designer_undo_redo():
    designer = CurtainWallDesigner(4.0, 3.0, columns=2, rows=2)
    designer.set_panel_type(["panel-0", "panel-1"], "window")
    group = designer.merge(["panel-0", "panel-1"])
    assert group is not None

    designer.undo()
    assert designer.grid.get("panel-0").merged_id is None
    assert designer.grid.get("panel-0").type == PanelType.WINDOW

    designer.redo()
    assert designer.grid.get("panel-0").merged_id == group

    designer.undo()
    designer.undo()
    assert designer.grid.get("panel-0").type == PanelType.STRUCTURE
    assert designer.undo() is None


def test_designer_undo_merges_only():
    designer = CurtainWallDesigner(4.0, 3.0, columns=2, rows=2)
    designer.merge(["panel-0", "panel-1"])
    designer.set_panel_type(["panel-3"], "door")

    state = designer.undo_merges()
    assert state.action == "panel_merge"
    assert designer.grid.merge_groups() == {}
    # edits after the merge are rolled back too
    assert designer.grid.get("panel-3").type == PanelType.STRUCTURE


def test_designer_shape_change_clears_history():
    designer = CurtainWallDesigner(4.0, 3.0, columns=2, rows=2)
    designer.set_panel_type(["panel-0"], "window")
    assert designer.history.can_undo

    designer.set_columns(3)
    assert not designer.history.can_undo
    assert len(designer.grid.panels) == 6


def test_designer_rejected_shape_keeps_session():
    designer = CurtainWallDesigner(6.0, 3.0, columns=3, rows=3)
    designer.set_panel_type(["panel-0"], "door")

    with pytest.raises(ValueError):
        designer.set_columns(0)

    assert designer.history.can_undo
    assert len(designer.grid.panels) == 9
    designer.resize_row(0, 1.0)
    assert designer.grid.get("panel-0").type == PanelType.DOOR
    assert designer.grid.get("panel-0").height == pytest.approx(1.0)


def test_designer_history_is_bounded():
    designer = CurtainWallDesigner(4.0, 3.0, columns=2, rows=2)
    for i in range(60):
        designer.set_panel_type(["panel-0"], "window" if i % 2 else "door")
    assert len(designer.history) == 50


def test_run_curtain_wall_layout():
    with warnings.catch_warnings():
        warnings.simplefilter("error", GeometryInconsistency)
        data = run_curtain_wall_layout(4.0, 3.0, 2, 2, window_cells=[(0, 0), (0, 1)])
    assert data["glassArea"] == pytest.approx(6.0)
    assert data["cornerCount"] == 4

    with pytest.raises(KeyError):
        run_curtain_wall_layout(4.0, 3.0, 2, 2, preset_name="Nope")
