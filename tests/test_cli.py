"""
Tests for the command line entry point and reporter.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from gatekeeper import __version__
from gatekeeper.cli import build_filter_set, build_store, main, run, setup_logging
from gatekeeper.config import FilterConfig, LoggingConfig, StoreConfig, SyncConfig
from gatekeeper.errors import ApplyFailure, ConfigReadError, GatekeeperError, ValidationAbort
from gatekeeper.filterset import IpsetFilterSet, MemoryFilterSet, NftablesFilterSet
from gatekeeper.reconciler import ReconcileResult
from gatekeeper.reporter import ExitCode, Reporter
from gatekeeper.store import FileConfigStore, MemoryConfigStore, UciConfigStore


class TestReporter:
    """Tests for Reporter output."""

    def test_success_line(self) -> None:
        stream = io.StringIO()
        result = ReconcileResult(set_name="static_macs", entries_scanned=3, addresses_seen=3,
                                 target=frozenset())

        code = Reporter(stream).success(result)

        assert code == ExitCode.OK
        assert stream.getvalue() == "Successfully synchronized 0 static MAC addresses.\n"

    def test_dry_run_line(self) -> None:
        stream = io.StringIO()
        result = ReconcileResult(set_name="static_macs", entries_scanned=0, addresses_seen=0,
                                 target=frozenset(), dry_run=True)

        Reporter(stream).success(result)
        assert stream.getvalue().startswith("Dry run: would synchronize 0")

    def test_validation_abort(self) -> None:
        stream = io.StringIO()
        error = ValidationAbort([], entries_scanned=3)

        assert Reporter(stream).failure(error) == ExitCode.VALIDATION_ABORT
        assert "aborted" in stream.getvalue()
        assert stream.getvalue().count("\n") == 1

    def test_apply_failure(self) -> None:
        stream = io.StringIO()
        error = ApplyFailure("static_macs", "Could not process rule", ["nft", "-f", "-"], 1)

        assert Reporter(stream).failure(error) == ExitCode.APPLY_FAILURE
        assert "static_macs rejected the update" in stream.getvalue()

    def test_config_read_error(self) -> None:
        stream = io.StringIO()

        assert Reporter(stream).failure(ConfigReadError("uci missing")) == ExitCode.CONFIG_ERROR
        assert "configuration store unreadable" in stream.getvalue()

    def test_generic_error(self) -> None:
        stream = io.StringIO()

        assert Reporter(stream).failure(GatekeeperError("odd")) == ExitCode.CONFIG_ERROR

    def test_success_counts_logged_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the pass statistics reach the log at info level."""
        store = MemoryConfigStore(["aa:bb:cc:dd:ee:01", "aa:bb:cc:dd:ee:02", "aa:bb:cc:dd:ee:01"])

        with caplog.at_level(logging.INFO, logger="gatekeeper.reporter"):
            run(SyncConfig(), store, MemoryFilterSet(), reporter=Reporter(io.StringIO()))

        assert "3 scanned, 2 applied, 1 duplicate(s)" in caplog.text


class TestRun:
    """Tests for run() with injected store and filter set."""

    def test_scenario_b_summary(self, capsys: pytest.CaptureFixture) -> None:
        """Test the success summary and exit code."""
        store = MemoryConfigStore(["aa:bb:cc:dd:ee:01", "aa:bb:cc:dd:ee:02", "aa:bb:cc:dd:ee:01"])
        filter_set = MemoryFilterSet()

        code = run(SyncConfig(), store, filter_set)

        assert code == 0
        assert capsys.readouterr().out == "Successfully synchronized 2 static MAC addresses.\n"

    def test_scenario_c_summary(self, capsys: pytest.CaptureFixture) -> None:
        code = run(SyncConfig(), MemoryConfigStore([]), MemoryFilterSet(initial=["aa:bb:cc:dd:ee:01"]))

        assert code == 0
        assert capsys.readouterr().out == "Successfully synchronized 0 static MAC addresses.\n"

    def test_scenario_a_exit_code(self, capsys: pytest.CaptureFixture) -> None:
        filter_set = MemoryFilterSet(initial=["11:22:33:44:55:66"])
        store = MemoryConfigStore(["aa:bb:cc:dd:ee:01", "AA:BB:CC:DD:EE:01", "zz:invalid"])

        code = run(SyncConfig(), store, filter_set)

        assert code == ExitCode.VALIDATION_ABORT
        out = capsys.readouterr().out
        assert out.count("\n") == 1
        assert "1 malformed address(es) in 3 entries" in out
        assert filter_set.members() == frozenset({"11:22:33:44:55:66"})

    def test_apply_failure_exit_code(self, capsys: pytest.CaptureFixture) -> None:
        filter_set = MemoryFilterSet(reject="No such file or directory")

        code = run(SyncConfig(), MemoryConfigStore(["aa:bb:cc:dd:ee:01"]), filter_set)

        assert code == ExitCode.APPLY_FAILURE

    def test_custom_kind_and_field(self, capsys: pytest.CaptureFixture) -> None:
        """Test the configured kind and field reach the store."""
        config = SyncConfig(store=StoreConfig(kind="static", field="hwaddr"))
        store = MemoryConfigStore(["aa:bb:cc:dd:ee:01"], kind="static", field="hwaddr")
        filter_set = MemoryFilterSet()

        assert run(config, store, filter_set) == 0
        assert filter_set.members() == frozenset({"aa:bb:cc:dd:ee:01"})


class TestBuilders:
    """Tests for backend construction from config."""

    def test_default_store_is_uci(self) -> None:
        store = build_store(SyncConfig())
        assert isinstance(store, UciConfigStore)
        assert store.package == "dhcp"

    def test_file_store(self, hosts_file: Path) -> None:
        config = SyncConfig(store=StoreConfig(backend="file", path=str(hosts_file)))
        assert isinstance(build_store(config), FileConfigStore)

    def test_default_filter_is_nftables(self) -> None:
        fs = build_filter_set(SyncConfig())
        assert isinstance(fs, NftablesFilterSet)
        assert fs.qualified_name == "inet fw4 static_macs"
        assert fs.binary == "nft"

    def test_ipset_filter(self) -> None:
        config = SyncConfig(filter=FilterConfig(backend="ipset", binary="/usr/sbin/ipset"))
        fs = build_filter_set(config)
        assert isinstance(fs, IpsetFilterSet)
        assert fs.binary == "/usr/sbin/ipset"


class TestMain:
    """Tests for the main() entry point."""

    def test_version(self, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_full_pass(self, sample_config: Path, capsys: pytest.CaptureFixture) -> None:
        """Test a pass from YAML config and host file into a fake set."""
        filter_set = MemoryFilterSet()
        with patch("gatekeeper.cli.build_filter_set", return_value=filter_set):
            code = main(["-c", str(sample_config)])

        assert code == 0
        assert capsys.readouterr().out == "Successfully synchronized 4 static MAC addresses.\n"
        assert filter_set.members() == frozenset({
            "aa:bb:cc:dd:ee:01",
            "aa:bb:cc:dd:ee:02",
            "aa:bb:cc:dd:ee:03",
            "aa:bb:cc:dd:ee:04",
        })

    def test_dry_run(self, sample_config: Path, capsys: pytest.CaptureFixture) -> None:
        filter_set = MemoryFilterSet()
        with patch("gatekeeper.cli.build_filter_set", return_value=filter_set):
            code = main(["-c", str(sample_config), "--dry-run"])

        assert code == 0
        assert "Dry run" in capsys.readouterr().out
        assert filter_set.members() == frozenset()

    def test_missing_config(self, temp_dir: Path, capsys: pytest.CaptureFixture) -> None:
        code = main(["-c", str(temp_dir / "nope.yaml")])

        assert code == ExitCode.CONFIG_ERROR
        assert "not found" in capsys.readouterr().err

    def test_invalid_config(self, temp_dir: Path, capsys: pytest.CaptureFixture) -> None:
        path = temp_dir / "sync.yaml"
        path.write_text(yaml.dump({"filter": {"backend": "pf"}}))

        code = main(["-c", str(path)])

        captured = capsys.readouterr()
        assert code == ExitCode.CONFIG_ERROR
        assert "Invalid filter backend" in captured.err
        assert captured.out == ""

    def test_unreadable_store(self, temp_dir: Path, capsys: pytest.CaptureFixture) -> None:
        path = temp_dir / "sync.yaml"
        path.write_text(yaml.dump({
            "store": {"backend": "file", "path": str(temp_dir / "missing-hosts.yaml")},
        }))

        with patch("gatekeeper.cli.build_filter_set", return_value=MemoryFilterSet()):
            code = main(["-c", str(path)])

        assert code == ExitCode.CONFIG_ERROR
        assert "configuration store unreadable" in capsys.readouterr().out

    def test_string_timeout_is_config_error(
        self, temp_dir: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Test a quoted timeout is reported as a configuration error."""
        path = temp_dir / "sync.yaml"
        path.write_text('filter:\n  timeout: "30"\n')

        code = main(["-c", str(path)])

        captured = capsys.readouterr()
        assert code == ExitCode.CONFIG_ERROR
        assert "Invalid filter timeout: '30'" in captured.err
        assert captured.out == ""

    def test_numeric_set_name_is_config_error(
        self, temp_dir: Path, capsys: pytest.CaptureFixture
    ) -> None:
        path = temp_dir / "sync.yaml"
        path.write_text("filter:\n  table: 4\n  set_name: 1234\n")

        code = main(["-c", str(path)])

        assert code == ExitCode.CONFIG_ERROR
        assert "Invalid filter set name: 1234" in capsys.readouterr().err

    def test_unknown_section_key(self, temp_dir: Path, capsys: pytest.CaptureFixture) -> None:
        path = temp_dir / "sync.yaml"
        path.write_text("filter:\n  chain: input\n")

        assert main(["-c", str(path)]) == ExitCode.CONFIG_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_config_path_is_directory(
        self, temp_dir: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Test an unreadable config path exits with the config error code."""
        code = main(["-c", str(temp_dir)])

        assert code == ExitCode.CONFIG_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_unopenable_log_file(
        self, sample_config: Path, temp_dir: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Test a log file in a missing directory is a configuration error."""
        data = yaml.safe_load(sample_config.read_text())
        data["logging"]["file"] = str(temp_dir / "no-such-dir" / "sync.log")
        sample_config.write_text(yaml.dump(data))
        filter_set = MemoryFilterSet(initial=["11:22:33:44:55:66"])

        with patch("gatekeeper.cli.build_filter_set", return_value=filter_set):
            code = main(["-c", str(sample_config)])

        captured = capsys.readouterr()
        assert code == ExitCode.CONFIG_ERROR
        assert "cannot open log file" in captured.err
        assert captured.out == ""
        assert filter_set.write_count == 0


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_unopenable_file_raises_before_configuring(self, temp_dir: Path) -> None:
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level

        with pytest.raises(OSError):
            setup_logging(LoggingConfig(level="debug", file=str(temp_dir / "missing" / "x.log")))

        assert root.handlers == handlers
        assert root.level == level
