import pytest

from meetgrid.__main__ import main

FRAGMENT = "u=1:Ann:2563eb,2:Ben:22c55e&sel=1:2024-01-10=0.1.2|2:2024-01-10=1.2.3&a=2"


def test_ranges_command(capsys):
    main(["ranges", "https://example.org/#" + FRAGMENT])
    out = capsys.readouterr().out
    assert "Ben (active)" in out
    assert "2024-01-10 00:00 - 00:45" in out
    assert out.rstrip().endswith("2024-01-10 00:15 - 00:45")


def test_ranges_command_reports_skipped_tokens(capsys):
    main(["ranges", FRAGMENT.replace("&a=2", "|9:2024-01-10=1&a=2")])
    err = capsys.readouterr().err
    assert "skipped selections of unknown user '9'" in err


def test_export_command(tmp_path, capsys):
    out_path = tmp_path / "common.ics"
    main(["export", FRAGMENT, str(out_path)])
    assert out_path.exists()
    assert "Exported 1 range to" in capsys.readouterr().out


def test_bad_fragment_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["ranges", "not a fragment"])
    assert exc.value.code == 1


def test_usage_on_wrong_arguments(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["export", FRAGMENT])
    assert exc.value.code == 2
    assert "usage" in capsys.readouterr().err
