"""
Tests for the validgen command line entry point.
"""

import logging

import pytest
import yaml

from validgen.cli import build_parser, main
from validgen.colored_logging import ColoredFormatter, log_success
from validgen.writer import output_path_for

from tests.declarations import PRODUCT_DECLARATIONS


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() installs its own root handler; put the original ones back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def product_file(write_declarations):
    return write_declarations(PRODUCT_DECLARATIONS)


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.input_files == []
    assert args.config is None
    assert args.template_variant is None
    assert args.format_output is None
    assert not args.check and not args.stdout


def test_parser_rejects_unknown_variant():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--variant", "fancy"])


def test_generate_from_positional_files(product_file):
    assert main([str(product_file), "--no-color"]) == 0
    assert output_path_for(product_file).exists()


def test_generate_from_config_file(product_file, tmp_path):
    config_file = tmp_path / "validgen.yaml"
    config_file.write_text(
        yaml.safe_dump({"input_files": [product_file.name], "output_suffix": "_checked"}), encoding="utf-8"
    )

    assert main(["-c", str(config_file), "--no-color"]) == 0
    assert output_path_for(product_file, "_checked").exists()


def test_check_mode_exit_codes(product_file):
    assert main([str(product_file), "--check", "--no-color"]) == 1
    assert not output_path_for(product_file).exists()

    assert main([str(product_file), "--no-color"]) == 0
    assert main([str(product_file), "--check", "--no-color"]) == 0


def test_stdout_mode_writes_nothing(product_file, capsys):
    assert main([str(product_file), "--stdout", "--variant", "newtype", "--no-color"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("# Code generated by validgen")
    assert "NameValid = NewType(" in out
    assert not output_path_for(product_file).exists()


def test_errors_exit_with_status_one(write_declarations):
    broken = write_declarations("class BrokenInput:\n    name: str = \n")

    assert main([str(broken), "--no-color", "-v"]) == 1


def test_missing_input_files_is_config_error(capsys):
    assert main(["--no-color"]) == 1
    assert "CONFIG_ERROR" in capsys.readouterr().err


def test_formatter_colors_success_messages():
    formatter = ColoredFormatter(use_colors=False)
    formatter.use_colors = True
    record = logging.LogRecord("validgen", logging.INFO, __file__, 1, f"{ColoredFormatter.SUCCESS_PREFIX}done", None, None)

    formatted = formatter.format(record)

    assert formatted.startswith(ColoredFormatter.SPECIAL_COLORS["success"])
    assert formatted.endswith(ColoredFormatter.RESET)


def test_log_success_prefix(caplog):
    logger = logging.getLogger("validgen.tests")
    with caplog.at_level(logging.INFO, logger="validgen.tests"):
        log_success(logger, "written")

    assert caplog.messages == [f"{ColoredFormatter.SUCCESS_PREFIX}written"]
