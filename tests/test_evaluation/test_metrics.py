import numpy as np
import pytest

from stepselect.evaluation.metrics import ClassificationMetricsCalculator


class TestClassificationMetricsCalculator:

    def setup_method(self):
        self.calculator = ClassificationMetricsCalculator()

    def test_perfect_ranking(self):
        y_true = np.array([0, 0, 1, 1])
        proba = np.array([0.1, 0.2, 0.8, 0.9])

        metrics = self.calculator.calculate_comprehensive_metrics(y_true, proba)

        assert metrics['accuracy'] == 1.0
        assert metrics['roc_auc'] == 1.0
        assert metrics['gini'] == 1.0
        assert metrics['ks_statistic'] == 1.0
        assert metrics['matthews_corr_coef'] == pytest.approx(1.0)

    def test_confusion_counts(self):
        y_true = np.array([1, 1, 1, 0, 0, 0])
        proba = np.array([0.9, 0.6, 0.3, 0.7, 0.2, 0.1])

        metrics = self.calculator.calculate_comprehensive_metrics(y_true, proba)

        assert metrics['true_positives'] == 2
        assert metrics['false_negatives'] == 1
        assert metrics['false_positives'] == 1
        assert metrics['true_negatives'] == 2
        assert metrics['sensitivity'] == pytest.approx(2 / 3)
        assert metrics['specificity'] == pytest.approx(2 / 3)
        assert metrics['precision'] == pytest.approx(2 / 3)

    def test_threshold_controls_labels(self):
        calculator = ClassificationMetricsCalculator(threshold=0.25)
        labels = calculator.predict_labels(np.array([0.1, 0.3, 0.25]))
        assert labels.tolist() == [0, 1, 1]
