"""
End-to-end tests of the command line tool: report on stdout, correlation
length on stderr, nonzero status and no report on failure.
"""

import numpy as np
import pytest

from ndautocorr.cli import build_config, build_parser, main


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_report_rows_and_trailer(tmp_path, capsys):
    path = _write(tmp_path, 'alt.txt', "1\n-1\n1\n-1\n")
    assert main([path, '-avezero', '-nsum']) == 0

    out, err = capsys.readouterr()
    rows = [line.split() for line in out.strip().splitlines()]
    assert rows == [['0', '1', '4'], ['1', '-1', '3']]
    assert '# correlation length =' in err


def test_periodic_and_rms_columns(tmp_path, capsys):
    path = _write(tmp_path, 'alt.txt', "1\n-1\n1\n-1\n")
    assert main([path, '-p', '-rms', '-nsum']) == 0

    out, _ = capsys.readouterr()
    rows = [[float(v) for v in line.split()] for line in out.strip().splitlines()]
    assert rows == [[0.0, 1.0, 0.0, 4.0], [1.0, -1.0, 0.0, 4.0]]


def test_fixed_domain_multiple_data_sets(tmp_path, capsys):
    rng = np.random.default_rng(2)
    blocks = []
    for n in (30, 50):
        blocks.append("\n".join(f"{a:.10f} {b:.10f}" for a, b in rng.normal(size=(n, 2))))
    path = _write(tmp_path, 'two.txt', "\n\n".join(blocks) + "\n")

    assert main([path, '-L', '10', '-nsum', '--fit']) == 0
    out, err = capsys.readouterr()
    rows = [line.split() for line in out.strip().splitlines()]
    assert [int(r[0]) for r in rows] == list(range(11))
    assert [int(r[2]) for r in rows] == [(30 - j) + (50 - j) for j in range(11)]
    assert 'exponential fit' in err


def test_dimension_mismatch_aborts_without_report(tmp_path, capsys):
    path = _write(tmp_path, 'bad.txt', "1 2\n3\n4 5\n")
    assert main([path]) == 1

    out, err = capsys.readouterr()
    assert out == ''
    assert 'DimensionMismatch' in err


def test_threshold_with_several_data_sets_is_rejected(tmp_path, capsys):
    path = _write(tmp_path, 'sets.txt', "1\n2\n3\n4\n\n4\n3\n2\n1\n")
    assert main([path, '-t', '0.5']) == 1

    out, err = capsys.readouterr()
    assert out == ''
    assert 'ConfigurationError' in err
    assert '-L' in err


def test_threshold_with_fixed_domain_and_several_data_sets_is_rejected(tmp_path, capsys):
    path = _write(tmp_path, 'sets.txt', "1\n2\n3\n4\n\n4\n3\n2\n1\n")
    assert main([path, '-L', '2', '-t', '0.5']) == 1

    out, err = capsys.readouterr()
    assert out == ''
    assert 'ConfigurationError' in err


def test_threshold_out_of_range_is_rejected(tmp_path, capsys):
    path = _write(tmp_path, 'one.txt', "1\n2\n3\n")
    assert main([path, '-threshold', '2']) == 1
    assert 'between -1.0 and 1.0' in capsys.readouterr().err


def test_bad_number_reports_file_and_line(tmp_path, capsys):
    path = _write(tmp_path, 'typo.txt', "1\n2\n3,5\n")
    assert main([path]) == 1

    err = capsys.readouterr().err
    assert 'typo.txt' in err
    assert 'near line 3' in err


def test_yaml_config_is_overridden_by_flags(tmp_path):
    cfg_path = _write(tmp_path, 'run.yaml', "periodic: true\ndomain_size: 7\n")
    args = build_parser().parse_args(['--config', cfg_path, '-L', '3', '-avezero'])
    config = build_config(args)

    assert config.periodic
    assert config.domain_size == 3
    assert not config.subtract_ave


def test_single_dash_flag_spellings_are_accepted():
    args = build_parser().parse_args(['-P', '-ave', '-rms', '-nsum', '-T', '-0.25'])
    config = build_config(args)
    assert config.periodic
    assert config.subtract_ave
    assert config.report_rms
    assert config.report_nsum
    assert config.threshold == pytest.approx(-0.25)


def test_log_file_records_progress(tmp_path, capsys):
    path = _write(tmp_path, 'one.txt', "1\n2\n3\n4\n")
    log_path = tmp_path / 'logs' / 'run.log'
    assert main([path, '--log-file', str(log_path)]) == 0

    text = log_path.read_text()
    assert 'processing data set #1' in text
    assert '# INFO: processing data set #1' in capsys.readouterr().err
