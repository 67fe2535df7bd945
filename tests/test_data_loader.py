"""
Unit tests for the data loading pipeline.
"""
import logging

import numpy as np
import pytest

from tictactoe_ai.exceptions import DatasetError
from tictactoe_ai.evaluation.data_loader import (
    TrainingSample,
    Dataset,
    parse_dataset,
    load_dataset,
    split_dataset,
    normalize_features,
    apply_normalization,
    denormalize_features,
    samples_from_dataset,
)
from tictactoe_ai.evaluation.weights import FEATURE_NAMES


HEADER = ",".join(FEATURE_NAMES + ['label'])

VALID_TEXT = "\n".join([
    HEADER,
    "3,2,1,0,1,2,1",
    "2,3,0,1,0,1,-1",
    "4,3,2,0,1,3,1",
])


def make_dataset(n):
    features = np.arange(n * 6, dtype=np.float64).reshape(n, 6)
    labels = np.array([1 if i % 2 == 0 else -1 for i in range(n)], dtype=np.float64)
    return Dataset(features, labels)


class TestParseDataset:
    """Tests for parsing delimited dataset text."""

    def test_parses_valid_rows(self):
        dataset = parse_dataset(VALID_TEXT)
        assert len(dataset) == 3
        assert dataset.feature_count == 6
        assert dataset.feature_names == FEATURE_NAMES
        assert dataset.labels.tolist() == [1.0, -1.0, 1.0]
        assert dataset.features[0].tolist() == [3, 2, 1, 0, 1, 2]

    def test_keeps_file_order(self):
        dataset = parse_dataset(VALID_TEXT)
        assert dataset.features[:, 0].tolist() == [3, 2, 4]

    def test_drops_wrong_column_count(self):
        text = VALID_TEXT + "\n1,2,3\n"
        assert len(parse_dataset(text)) == 3

    def test_drops_non_numeric_rows(self, caplog):
        text = VALID_TEXT + "\n1,2,x,0,1,2,1\n"
        with caplog.at_level(logging.WARNING):
            dataset = parse_dataset(text)
        assert len(dataset) == 3
        assert "Dropped 1 malformed" in caplog.text

    def test_drops_non_finite_rows(self):
        text = VALID_TEXT + "\n1,2,nan,0,1,2,1\n1,2,inf,0,1,2,1\n"
        assert len(parse_dataset(text)) == 3

    def test_custom_delimiter(self):
        text = VALID_TEXT.replace(",", ";")
        assert len(parse_dataset(text, delimiter=';')) == 3

    def test_empty_text(self):
        with pytest.raises(DatasetError):
            parse_dataset("")

    def test_header_only(self):
        with pytest.raises(DatasetError):
            parse_dataset(HEADER)

    def test_no_valid_rows(self):
        with pytest.raises(DatasetError):
            parse_dataset(HEADER + "\na,b,c,d,e,f,g\n")

    def test_dataset_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_dataset("")


class TestLoadDataset:
    """Tests for reading dataset files."""

    def test_loads_file(self, tmp_path):
        path = tmp_path / "games.csv"
        path.write_text(VALID_TEXT)
        assert len(load_dataset(path)) == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetError):
            load_dataset(tmp_path / "missing.csv")


class TestDataset:
    """Tests for Dataset helpers."""

    def test_samples_round_trip(self):
        dataset = parse_dataset(VALID_TEXT)
        samples = samples_from_dataset(dataset)
        assert len(samples) == 3
        assert samples[1].label == -1
        rebuilt = Dataset.from_samples(samples)
        assert np.array_equal(rebuilt.features, dataset.features)
        assert np.array_equal(rebuilt.labels, dataset.labels)

    def test_from_samples_empty(self):
        with pytest.raises(DatasetError):
            Dataset.from_samples([])

    def test_concat_keeps_order(self):
        a = parse_dataset(VALID_TEXT)
        b = make_dataset(2)
        combined = a.concat(b)
        assert len(combined) == 5
        assert combined.features[3].tolist() == b.features[0].tolist()

    def test_concat_feature_mismatch(self):
        a = make_dataset(2)
        b = Dataset(np.zeros((2, 3)), np.ones(2), ['a', 'b', 'c'])
        with pytest.raises(DatasetError):
            a.concat(b)

    def test_statistics(self):
        stats = parse_dataset(VALID_TEXT).get_statistics()
        assert stats['total_samples'] == 3
        assert stats['positive_count'] == 2
        assert stats['negative_count'] == 1
        assert stats['balance'] == "66.7%"
        assert stats['feature_means'][0] == pytest.approx(3.0)

    def test_sample_repr(self):
        sample = TrainingSample(features=np.array([1.0, 2.0]), label=-1)
        assert "label=-1" in repr(sample)


class TestSplitDataset:
    """Tests for shuffled train/test splits."""

    def test_sizes(self):
        split = split_dataset(make_dataset(10), test_ratio=0.25, random_state=0)
        assert len(split.test) == 2
        assert len(split.train) == 8

    def test_rows_are_partitioned(self):
        dataset = make_dataset(10)
        split = split_dataset(dataset, test_ratio=0.3, random_state=1)
        rows = sorted(split.train.features[:, 0].tolist() + split.test.features[:, 0].tolist())
        assert rows == dataset.features[:, 0].tolist()

    def test_labels_follow_rows(self):
        split = split_dataset(make_dataset(10), test_ratio=0.5, random_state=2)
        for part in split:
            for row, label in zip(part.features, part.labels):
                expected = 1 if (row[0] / 6) % 2 == 0 else -1
                assert label == expected

    def test_seeded_split_is_reproducible(self):
        a = split_dataset(make_dataset(20), random_state=3)
        b = split_dataset(make_dataset(20), random_state=3)
        assert np.array_equal(a.test.features, b.test.features)

    def test_zero_ratio(self):
        split = split_dataset(make_dataset(5), test_ratio=0.0, random_state=0)
        assert len(split.train) == 5
        assert len(split.test) == 0

    @pytest.mark.parametrize("ratio", [-0.1, 1.0, 1.5])
    def test_invalid_ratio(self, ratio):
        with pytest.raises(ValueError):
            split_dataset(make_dataset(5), test_ratio=ratio)


class TestNormalization:
    """Tests for min-max normalization."""

    def test_columns_scaled_to_unit_range(self):
        X = np.array([[1.0, 5.0], [3.0, 5.0], [2.0, 5.0]])
        result = normalize_features(X)
        assert result.normalized[:, 0].tolist() == pytest.approx([0.0, 1.0, 0.5])
        assert result.mins.tolist() == [1.0, 5.0]
        assert result.maxs.tolist() == [3.0, 5.0]

    def test_zero_range_column_maps_to_zero(self):
        X = np.array([[1.0, 5.0], [3.0, 5.0]])
        result = normalize_features(X)
        assert result.normalized[:, 1].tolist() == [0.0, 0.0]

    def test_denormalize_restores_values(self):
        X = np.array([[1.0, 5.0, -2.0], [3.0, 5.0, 4.0], [2.0, 5.0, 0.0]])
        result = normalize_features(X)
        restored = denormalize_features(result.normalized, result.mins, result.maxs)
        assert np.allclose(restored, X)

    def test_apply_normalization_uses_stored_ranges(self):
        X = np.array([[0.0, 5.0], [10.0, 5.0]])
        result = normalize_features(X)
        scaled = apply_normalization(np.array([[5.0, 7.0]]), result.mins, result.maxs)
        assert scaled.tolist() == [[0.5, 0.0]]

    def test_rejects_empty_matrix(self):
        with pytest.raises(ValueError):
            normalize_features(np.zeros((0, 3)))
