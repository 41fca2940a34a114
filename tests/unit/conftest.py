"""Pytest fixtures providing stand-ins for the external trimming tools.

The stand-ins are small bash scripts honouring the command line interface
of seqqs, sickle, Rscript and the sequence_handling helper scripts, so
streaming, trimming layout and cleanup run end to end without the real
programs installed.
"""
import bz2
import gzip
import os
import stat

import pytest

FAKE_SEQQS = """#!/bin/bash
# seqqs [-q enc] [-e] -p prefix <file|->
enc=""
prefix=""
echo_out=0
while getopts "q:p:e" opt; do
    case $opt in
        q) enc=$OPTARG ;;
        p) prefix=$OPTARG ;;
        e) echo_out=1 ;;
        *) exit 2 ;;
    esac
done
shift $((OPTIND - 1))
in_file=${1:--}
reads="${prefix}_reads.tmp"
if [ "$in_file" = "-" ]; then
    if [ $echo_out -eq 1 ]; then
        tee "$reads"
    else
        cat > "$reads"
    fi
else
    cat "$in_file" > "$reads" || exit 1
fi
echo "$enc" > "${prefix}_nucl.txt"
awk 'NR % 4 == 2 {print length($0)}' "$reads" > "${prefix}_len.txt"
awk 'NR % 4 == 0' "$reads" > "${prefix}_qual.txt"
rm -f "$reads"
"""

FAKE_SICKLE = """#!/bin/bash
# sickle pe|se ... -f in [-r in2] -o out [-p out2 -s singles]
mode=$1
shift
while [ $# -gt 0 ]; do
    case $1 in
        -f) fwd=$2; shift ;;
        -r) rev=$2; shift ;;
        -o) out1=$2; shift ;;
        -p) out2=$2; shift ;;
        -s) singles=$2; shift ;;
        -t|-q) shift ;;
    esac
    shift
done
if [ "$mode" = "pe" ]; then
    gzip -c < "$fwd" > "$out1" || exit 1
    gzip -c < "$rev" > "$out2" || exit 1
    printf "" | gzip -c > "$singles"
else
    gzip -c < "$fwd" > "$out1" || exit 1
fi
"""

FAKE_FIX_QUALITY = """#!/bin/bash
if [ -e "$1_adj" ]; then
    echo "quality already adjusted: $1" >&2
    exit 1
fi
cp "$1" "$1_adj"
"""

FAKE_RSCRIPT = """#!/bin/bash
# Rscript plot_seqqs.R <6 tables> <name> <direction>
shift
for f in "$1" "$2" "$3" "$4" "$5" "$6"; do
    [ -f "$f" ] || { echo "missing $f" >&2; exit 1; }
done
touch "$7_$8_plots.pdf"
"""

FAKE_FAIL = """#!/bin/bash
echo "failing on purpose" >&2
exit 3
"""

READS = ("@read1\nACGTACGTAC\n+\nIIIIIIIIII\n"
         "@read2\nTTGCA\n+\nIIIII\n")


def write_executable(path, content):
    with open(path, "w") as out_handle:
        out_handle.write(content)
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def write_fastq(path, content=READS):
    path = str(path)
    if path.endswith(".gz"):
        with gzip.open(path, "wt") as out_handle:
            out_handle.write(content)
    elif path.endswith(".bz2"):
        with bz2.open(path, "wt") as out_handle:
            out_handle.write(content)
    else:
        with open(path, "w") as out_handle:
            out_handle.write(content)
    return path


@pytest.fixture
def fake_tools(tmp_path):
    """Directory of stand-in programs and a sequence_handling install."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    seq_hand = tmp_path / "sequence_handling"
    helper_dir = seq_hand / "HelperScripts"
    helper_dir.mkdir(parents=True)
    write_executable(helper_dir / "fix_quality.sh", FAKE_FIX_QUALITY)
    write_executable(helper_dir / "plot_seqqs.R", "# plotting script\n")
    return {"seqqs": write_executable(bin_dir / "seqqs", FAKE_SEQQS),
            "sickle": write_executable(bin_dir / "sickle", FAKE_SICKLE),
            "rscript": write_executable(bin_dir / "Rscript", FAKE_RSCRIPT),
            "fail": write_executable(bin_dir / "fail", FAKE_FAIL),
            "sequence_handling": str(seq_hand),
            "helper_dir": str(helper_dir)}


@pytest.fixture
def trim_config(tmp_path, fake_tools):
    """Quality trimming configuration wired to the stand-in programs."""
    return {"sample_list": str(tmp_path / "samples.txt"),
            "out_dir": str(tmp_path / "out"),
            "sequence_handling": fake_tools["sequence_handling"],
            "log_dir": None,
            "algorithm": {"forward_naming": r"_R1\.fastq\.gz$",
                          "reverse_naming": r"_R2\.fastq\.gz$",
                          "singles_naming": r"_single\.fastq$",
                          "quality_encoding": "illumina",
                          "quality_threshold": 20,
                          "num_cores": 1},
            "resources": {"seqqs": {"cmd": fake_tools["seqqs"]},
                          "sickle": {"cmd": fake_tools["sickle"]},
                          "rscript": {"cmd": fake_tools["rscript"]}}}


@pytest.fixture
def fastq_writer():
    """Write fastq reads, compressed according to the file extension."""
    return write_fastq


@pytest.fixture
def fastq_reads():
    """Content written by `fastq_writer` by default."""
    return READS
