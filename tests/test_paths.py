"""Tests for keyescrow.paths: collision-safe output paths."""

from datetime import datetime

from keyescrow.paths import allocate_unique_path, compute_run_paths, dated_path

NOW = datetime(2026, 3, 9, 14, 5, 7)


class TestAllocateUniquePath:
    def test_free_path_returned_unchanged(self, tmp_path):
        desired = tmp_path / "report_03-09.csv"
        assert allocate_unique_path(desired) == desired

    def test_first_collision_gets_update(self, tmp_path):
        desired = tmp_path / "report_03-09.csv"
        desired.touch()
        assert allocate_unique_path(desired) == tmp_path / "report_03-09-Update.csv"

    def test_counter_increments(self, tmp_path):
        desired = tmp_path / "report.csv"
        desired.touch()
        (tmp_path / "report-Update.csv").touch()
        (tmp_path / "report-Update1.csv").touch()
        assert allocate_unique_path(desired) == tmp_path / "report-Update2.csv"

    def test_gap_in_sequence_is_reused(self, tmp_path):
        desired = tmp_path / "report.csv"
        desired.touch()
        (tmp_path / "report-Update1.csv").touch()
        assert allocate_unique_path(desired) == tmp_path / "report-Update.csv"

    def test_no_extension(self, tmp_path):
        desired = tmp_path / "report"
        desired.touch()
        assert allocate_unique_path(desired) == tmp_path / "report-Update"

    def test_successive_runs_never_collide(self, tmp_path):
        desired = tmp_path / "run.log"
        seen = set()
        for _ in range(5):
            path = allocate_unique_path(desired)
            assert not path.exists()
            assert path not in seen
            seen.add(path)
            path.touch()
        assert len(seen) == 5

    def test_accepts_str(self, tmp_path):
        assert allocate_unique_path(str(tmp_path / "a.csv")) == tmp_path / "a.csv"


class TestRunPaths:
    def test_dated_path_keeps_extension(self, tmp_path):
        assert dated_path(tmp_path, "Escrow.csv", "%m-%d", NOW) == tmp_path / "Escrow_03-09.csv"

    def test_dated_path_extension_override(self, tmp_path):
        assert dated_path(tmp_path, "Escrow", "%m-%d-%y", NOW, ".log") == tmp_path / "Escrow_03-09-26.log"

    def test_compute_run_paths(self, tmp_path):
        paths = compute_run_paths(tmp_path, "Escrow.csv", "Escrow", NOW)
        assert paths.csv_path == tmp_path / "Escrow_03-09.csv"
        assert paths.log_path == tmp_path / "Escrow_03-09-26.log"

    def test_same_day_rerun(self, tmp_path):
        first = compute_run_paths(tmp_path, "Escrow.csv", "Escrow", NOW)
        first.csv_path.touch()
        first.log_path.touch()
        second = compute_run_paths(tmp_path, "Escrow.csv", "Escrow", NOW)
        assert second.csv_path == tmp_path / "Escrow_03-09-Update.csv"
        assert second.log_path == tmp_path / "Escrow_03-09-26-Update.log"

    def test_csv_and_log_allocated_independently(self, tmp_path):
        # Only the log collides; the CSV keeps its plain name
        (tmp_path / "Escrow_03-09-26.log").touch()
        paths = compute_run_paths(tmp_path, "Escrow.csv", "Escrow", NOW)
        assert paths.csv_path == tmp_path / "Escrow_03-09.csv"
        assert paths.log_path == tmp_path / "Escrow_03-09-26-Update.log"
