"""Tests for the sparse text data reader."""

import pytest

from adpredictor.dataset import iter_examples, parse_example_line, read_dataset
from adpredictor.errors import DataFormatError
from adpredictor.types import DataSet, Example, FeatureActivation


def test_parse_line():
    ex = parse_example_line("1 3:1 17:0.5 42:-2")
    assert ex.label == 1.0
    assert ex.features == [
        FeatureActivation(3, 1.0),
        FeatureActivation(17, 0.5),
        FeatureActivation(42, -2.0),
    ]


def test_bare_id_means_one():
    ex = parse_example_line("0\t5 6:2")
    assert ex.features == [FeatureActivation(5, 1.0), FeatureActivation(6, 2.0)]
    assert not ex.is_positive


def test_label_only():
    ex = parse_example_line("1")
    assert ex.features == []
    assert ex.is_positive


@pytest.mark.parametrize("line", ["x 1:1", "1 a:1", "1 3:b"])
def test_parse_line_rejects_garbage(line):
    with pytest.raises(ValueError):
        parse_example_line(line)


def test_read_dataset(tmp_path):
    path = tmp_path / "train.txt"
    path.write_text("# header comment\n1 1:1 2:1\n\n0 2:1\n-1 3:0.5\n")
    ds = read_dataset(path)
    assert len(ds) == 3
    assert [e.label for e in ds] == [1.0, 0.0, -1.0]
    assert ds.positive_rate == pytest.approx(1 / 3)


def test_malformed_line_reports_line_number(tmp_path):
    path = tmp_path / "train.txt"
    path.write_text("1 1:1\n1 1:1\n0 2:zz\n")
    with pytest.raises(DataFormatError) as exc_info:
        list(iter_examples(path))
    assert exc_info.value.line_no == 3


def test_active_features_drop_zeros():
    ex = Example.from_pairs([(1, 1.0), (2, 0.0), (3, -1.0)], label=1)
    assert [f.id for f in ex.active_features()] == [1, 3]


def test_empty_dataset_positive_rate():
    assert DataSet().positive_rate == 0.0
