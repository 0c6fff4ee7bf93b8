"""Tests for CLI app entry point."""

from unittest.mock import patch

from typer.testing import CliRunner

from trustscore.cli.app import app, main

runner = CliRunner()


def test_version_command():
    """Test 'version' prints trustscore version string."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "trustscore version" in result.output


def test_no_args_shows_help():
    """Test invoking with no arguments shows help (no_args_is_help)."""
    result = runner.invoke(app, [])
    assert result.exit_code in (0, 2)
    assert "Usage" in result.output or "trustscore" in result.output


def test_main_keyboard_interrupt():
    """Test main() handles KeyboardInterrupt with exit code 130."""
    with (
        patch("trustscore.cli.app.app", side_effect=KeyboardInterrupt),
        patch("trustscore.cli.app.sys") as mock_sys,
    ):
        main()
        mock_sys.exit.assert_called_with(130)


def test_main_exception():
    """Test main() handles unexpected exceptions with exit code 1."""
    with (
        patch("trustscore.cli.app.app", side_effect=RuntimeError("test error")),
        patch("trustscore.cli.app.sys") as mock_sys,
    ):
        main()
        mock_sys.exit.assert_called_with(1)


def test_train_delegates():
    """Test 'train' passes options through to train_command."""
    with patch("trustscore.cli.model_cmd.train_command") as mock_cmd:
        result = runner.invoke(app, ["train", "--samples", "300", "--seed", "7"])
        assert result.exit_code == 0
        mock_cmd.assert_called_once_with(config_path=None, samples=300, seed=7, verbose=False)


def test_cross_validate_delegates():
    with patch("trustscore.cli.model_cmd.cross_validate_command") as mock_cmd:
        result = runner.invoke(app, ["cross-validate", "-k", "5"])
        assert result.exit_code == 0
        mock_cmd.assert_called_once_with(
            config_path=None, samples=None, folds=5, seed=None, verbose=False
        )


def test_confusion_delegates():
    with patch("trustscore.cli.model_cmd.confusion_command") as mock_cmd:
        result = runner.invoke(app, ["confusion", "--threshold", "35"])
        assert result.exit_code == 0
        mock_cmd.assert_called_once_with(
            config_path=None, samples=None, threshold=35.0, seed=None, verbose=False
        )


def test_init_writes_config(tmp_path):
    """Test 'init' writes a default config and refuses to overwrite it."""
    config_path = tmp_path / "trustscore.yaml"

    result = runner.invoke(app, ["init", "--config", str(config_path)])
    assert result.exit_code == 0
    assert config_path.exists()

    result = runner.invoke(app, ["init", "--config", str(config_path)])
    assert result.exit_code == 0
    assert "already exists" in result.output

    result = runner.invoke(app, ["init", "--config", str(config_path), "--force"])
    assert result.exit_code == 0
