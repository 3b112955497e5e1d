import subprocess

import pytest

from quantpipe.pipeline import main, workspace


REQUIRED = [('-r1', 'a.fastq'), ('-r2', 'b.fastq'), ('-o', '/tmp/out')]


@pytest.fixture
def setup_ws(mocker):
    yield mocker.patch('quantpipe.pipeline.main.workspace.setup',
                       side_effect=workspace.setup)


@pytest.fixture
def tool_run(mocker):
    yield mocker.patch('quantpipe.pipeline.main.tool.run', return_value='report.tsv')


def _cl(reads, outdir, backend='local'):
    return [backend, '-r1', reads[0], '-r2', reads[1], '-o', outdir]


@pytest.mark.parametrize('missing', [flag for flag, _ in REQUIRED])
def test_missing_required_argument_exits_with_usage_error(missing, capsys):
    in_args = ['local']
    for flag, val in REQUIRED:
        if flag != missing:
            in_args += [flag, val]
    with pytest.raises(SystemExit) as excinfo:
        main.parse_cl_args(in_args)
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert missing in err
    assert 'usage:' in err


def test_unsupported_backend_rejected_before_workspace(reads, tmpdir, setup_ws, capsys):
    outdir = tmpdir.join('out')
    with pytest.raises(SystemExit) as excinfo:
        main.main(_cl(reads, str(outdir), backend='sge'))
    assert excinfo.value.code == 1
    assert 'sge' in capsys.readouterr().err
    assert not setup_ws.called
    assert not outdir.exists()


@pytest.mark.parametrize('extra', [['--bogus'], ['--bogus', 'x'], ['stray']])
def test_unknown_tokens_are_echoed(extra, capsys):
    in_args = ['local'] + [x for pair in REQUIRED for x in pair] + extra
    with pytest.raises(SystemExit) as excinfo:
        main.parse_cl_args(in_args)
    assert excinfo.value.code == 1
    assert extra[-1] in capsys.readouterr().err


@pytest.mark.parametrize('flag, val', [('-t', '0'), ('-t', 'two'), ('-p', '-5'), ('-m', '0')])
def test_invalid_numbers_are_usage_errors(flag, val):
    in_args = ['local'] + [x for pair in REQUIRED for x in pair] + [flag, val]
    with pytest.raises(SystemExit) as excinfo:
        main.parse_cl_args(in_args)
    assert excinfo.value.code == 1


def test_missing_read_file_fails_before_workspace(reads, tmpdir, setup_ws):
    outdir = tmpdir.join('out')
    with pytest.raises(SystemExit) as excinfo:
        main.main(['local', '-r1', reads[0], '-r2', str(tmpdir.join('nope_2.fq')),
                   '-o', str(outdir)])
    assert excinfo.value.code == 1
    assert not setup_ws.called
    assert not outdir.exists()


def test_successful_run(reads, tmpdir, tool_run):
    outdir = tmpdir.join('out')
    main.main(_cl(reads, str(outdir)))
    assert tool_run.call_count == 1
    run_config, ws, _, descriptor = tool_run.call_args[0]
    assert run_config.basename == 'S25_WT'
    assert ws.outdir == str(outdir)
    assert outdir.join('S25_WT-inputs.json').check(file=1)
    assert outdir.join('log', 'quantpipe.log').check(file=1)


def test_engine_exit_status_is_propagated(reads, tmpdir, tool_run):
    tool_run.side_effect = subprocess.CalledProcessError(3, 'cromwell')
    with pytest.raises(SystemExit) as excinfo:
        main.main(_cl(reads, str(tmpdir.join('out')), backend='slurm'))
    assert excinfo.value.code == 3


def test_workspace_failure_exits_with_error(reads, tmpdir, mocker, tool_run):
    mocker.patch('quantpipe.pipeline.main.workspace.setup',
                 side_effect=workspace.WorkspaceError('Could not create directory /x'))
    with pytest.raises(SystemExit) as excinfo:
        main.main(_cl(reads, str(tmpdir.join('out'))))
    assert excinfo.value.code == 1
    assert not tool_run.called


def test_placeholder_basename_rejected_before_workspace(reads, tmpdir, setup_ws):
    outdir = tmpdir.join('out')
    with pytest.raises(SystemExit) as excinfo:
        main.main(_cl(reads, str(outdir)) + ['-b', '__gtf__'])
    assert excinfo.value.code == 1
    assert not setup_ws.called
    assert not outdir.exists()


def test_malformed_system_config_exits_with_error(reads, tmpdir, setup_ws):
    user_config = tmpdir.join('system.yaml')
    user_config.write('defaults: [threads: 2\n')
    with pytest.raises(SystemExit) as excinfo:
        main.main(_cl(reads, str(tmpdir.join('out'))) + ['-c', str(user_config)])
    assert excinfo.value.code == 1
    assert not setup_ws.called
