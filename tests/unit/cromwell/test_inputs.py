import glob
import json
import os

import pytest

from quantpipe.cromwell import inputs
from quantpipe.pipeline import config_utils, run_info


def _template():
    with open(os.path.join(config_utils.get_definition_dir(), inputs.TEMPLATE)) as in_handle:
        return in_handle.read()


def test_template_placeholders_are_run_config_keys():
    assert inputs.find_placeholders(_template()) <= set(run_info.RUN_KEYS)


def test_substitute_leaves_no_placeholders(run_config):
    out = inputs.substitute(_template(), run_config._asdict())
    assert inputs.find_placeholders(out) == set()
    parsed = json.loads(out)
    assert parsed['rnaseq_quant.threads'] == 2
    assert parsed['rnaseq_quant.prior'] == 200000
    assert parsed['rnaseq_quant.basename'] == 'S25_WT'


def test_substitute_rejects_unknown_placeholders():
    with pytest.raises(inputs.DescriptorError) as excinfo:
        inputs.substitute('{"a": "__read_1__", "b": "__genome__"}', {'read_1': 'x'})
    assert '__genome__' in str(excinfo.value)


def test_substitute_rejects_missing_values():
    with pytest.raises(inputs.DescriptorError):
        inputs.substitute('{"a": "__reference_dir__"}', {'reference_dir': None})


def test_substitute_escapes_strings():
    out = inputs.substitute('{"name": "__basename__", "n": __threads__}',
                            {'basename': 'odd "name"\\x', 'threads': 4})
    assert json.loads(out) == {'name': 'odd "name"\\x', 'n': 4}


def test_substitute_rejects_placeholder_like_values():
    with pytest.raises(inputs.DescriptorError) as excinfo:
        inputs.substitute('["__basename__", "__threads__"]',
                          {'basename': '__threads__', 'threads': 1})
    assert 'basename' in str(excinfo.value)


def test_substitute_keeps_double_underscores_in_values():
    out = inputs.substitute('["__basename__", "__threads__"]',
                            {'basename': 'S25__WT', 'threads': 1})
    assert json.loads(out) == ['S25__WT', '1']


def test_create_points_reads_at_workspace_links(run_config, ws):
    out_file = inputs.create(run_config, ws)
    assert out_file == os.path.join(run_config.outdir, 'S25_WT-inputs.json')
    with open(out_file) as in_handle:
        descriptor = json.load(in_handle)
    assert descriptor['rnaseq_quant.read_1'] == ws.read_1
    assert descriptor['rnaseq_quant.read_2'] == ws.read_2
    assert descriptor['rnaseq_quant.reference_dir'] == '/refs/GRCh38'


def test_create_backs_up_changed_descriptor(run_config, ws):
    out_file = inputs.create(run_config, ws)
    inputs.create(run_config, ws)
    assert glob.glob(out_file + '.bak*') == []
    inputs.create(run_config._replace(max_iter=10), ws)
    backups = glob.glob(out_file + '.bak*')
    assert len(backups) == 1
    with open(backups[0]) as in_handle:
        assert json.load(in_handle)['rnaseq_quant.max_iter'] == 200
    with open(out_file) as in_handle:
        assert json.load(in_handle)['rnaseq_quant.max_iter'] == 10


def test_create_rejects_invalid_json(run_config, ws, tmpdir):
    template = tmpdir.join('bad.json')
    template.write('{"threads": __threads__,}')
    with pytest.raises(inputs.DescriptorError):
        inputs.create(run_config, ws, str(template))


def test_create_reports_unwritable_descriptor(run_config, ws, mocker):
    mocker.patch('quantpipe.cromwell.inputs.utils.write_atomic',
                 side_effect=OSError(13, 'Permission denied'))
    with pytest.raises(inputs.DescriptorError) as excinfo:
        inputs.create(run_config, ws)
    assert inputs.descriptor_file(run_config) in str(excinfo.value)


def test_create_reports_missing_template(run_config, ws, tmpdir):
    template = str(tmpdir.join('missing.json'))
    with pytest.raises(inputs.DescriptorError) as excinfo:
        inputs.create(run_config, ws, template)
    assert template in str(excinfo.value)
