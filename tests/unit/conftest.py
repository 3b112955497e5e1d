import pytest

from quantpipe.pipeline import config_utils, run_info, workspace


FASTQ = "@read1\nACGTACGT\n+\nIIIIIIII\n"


@pytest.fixture
def reads(tmpdir):
    in_dir = tmpdir.mkdir("raw")
    read_1 = in_dir.join("S25_WT_1.fastq.gz")
    read_2 = in_dir.join("S25_WT_2.fastq.gz")
    read_1.write(FASTQ)
    read_2.write(FASTQ)
    return str(read_1), str(read_2)


@pytest.fixture
def config():
    return config_utils.load_system_config()


@pytest.fixture
def run_config(reads, tmpdir):
    return run_info.RunConfig(read_1=reads[0], read_2=reads[1],
                              outdir=str(tmpdir.join("out")), basename="S25_WT",
                              threads=2, gtf="gencode.v38.annotation.gtf",
                              prior=200000, max_iter=200, backend="local",
                              reference_dir="/refs/GRCh38")


@pytest.fixture
def ws(run_config, config):
    return workspace.setup(run_config, config)
