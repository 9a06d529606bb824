import gzip
import json

import pytest

from fastq_composition.__main__ import build_parser, main


@pytest.fixture
def fastq_file(tmp_path):
    path = tmp_path / "reads.fastq"
    path.write_text("@\nAA\n+\n~~~\n@\nTA\n+\n~~~\n")
    return path


def test_parser_defaults():
    args = build_parser().parse_args(["extract", "5"])
    assert args.target_count == 5
    assert args.input is None
    assert args.output is None
    assert args.min_quality == 0
    assert args.n_content is None
    assert args.trim is None
    assert args.tsv is False


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_extract_json_to_stdout(fastq_file, capsys):
    """Test the extract command end to end in direct mode."""
    main(["extract", "1", "-i", str(fastq_file), "-t", "2", "--direct"])
    document = json.loads(capsys.readouterr().out)
    assert document["len"] == 2
    assert document["lib"][0] == {"pos": 1, "bases": {"A": 50, "T": 50, "G": 0, "C": 0, "N": 0}}
    assert document["lib"][1] == {"pos": 2, "bases": {"A": 100, "T": 0, "G": 0, "C": 0, "N": 0}}


def test_extract_tsv_from_gzip_to_file(tmp_path):
    """Test gzipped input and appending TSV output."""
    path = tmp_path / "reads.fastq.gz"
    with gzip.open(path, "wt") as handle:
        handle.write("@\nAAA\n+\n~~~\n")
    output = tmp_path / "comp.tsv"
    args = ["extract", "1", "-i", str(path), "-o", str(output), "-C", "-t", "2", "--tsv", "--seed", "1"]
    main(args)
    main(args)
    assert output.read_text() == "100\t0\t0\t0\t0\t100\t0\t0\t0\t0\n" * 2


def test_extract_colorspace_exits_cleanly(tmp_path, capsys):
    path = tmp_path / "reads.fastq"
    path.write_text("@\nACGT\n+\nIIII\n@\nA1GT\n+\nIIII\n")
    main(["extract", "10", "-i", str(path)])
    document = json.loads(capsys.readouterr().out)
    assert document["len"] == 4
    assert document["lib"][3]["bases"]["T"] == 100


def test_extract_inconsistent_lengths_exits_with_error(tmp_path):
    path = tmp_path / "reads.fastq"
    path.write_text("@\nACGT\n+\nIIII\n@\nACG\n+\nIII\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", "10", "-i", str(path)])
    assert excinfo.value.code == 1


def test_extract_negative_count_exits_with_error(caplog):
    """Test that a negative read count is reported without a traceback."""
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", "-1"])
    assert excinfo.value.code == 1
    assert "target_count must be non-negative" in caplog.text


def test_sample_command(fastq_file, capsys):
    main(["sample", "5", "-i", str(fastq_file), "-t", "2", "--skip-mid", "--skip-quals"])
    lines = capsys.readouterr().out.splitlines()
    assert sorted(lines) == ["@", "@", "AA", "TA"]


def test_plot_command(tmp_path):
    """Test that the plot command renders an image with comparison libraries."""
    paths = []
    for name, a in (("main", 60), ("lib1", 55), ("lib2", 65)):
        path = tmp_path / f"{name}.json"
        lib = [{"pos": p, "bases": {"A": a, "T": 100 - a, "G": 0, "C": 0, "N": 0}} for p in (1, 2, 3)]
        path.write_text(json.dumps({"lib": lib, "len": 3}) + "\n")
        paths.append(path)
    output = tmp_path / "plot.png"
    main(["plot", str(paths[0]), "-l", str(paths[1]), str(paths[2]), "-o", str(output)])
    assert output.exists()
    assert output.stat().st_size > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
