"""
Binary Classification Metrics
=============================

Metrics shared by every model in the comparison report: the stepwise
logistic model, the decision tree, the random forest and the lasso model.
"""

import numpy as np
from sklearn.metrics import (
    accuracy_score, precision_score, recall_score, f1_score,
    roc_auc_score, roc_curve, average_precision_score,
    confusion_matrix, log_loss, brier_score_loss
)
from typing import Dict


class ClassificationMetricsCalculator:
    """
    Metrics calculator for a two-class outcome coded 0/1
    """

    def __init__(self, threshold: float = 0.5):
        """
        Args:
            threshold: Probability cut-off used to turn scores into labels
        """
        self.threshold = threshold

    def predict_labels(self, y_pred_proba: np.ndarray) -> np.ndarray:
        return (np.asarray(y_pred_proba) >= self.threshold).astype(int)

    def calculate_comprehensive_metrics(self, y_true: np.ndarray,
                                        y_pred_proba: np.ndarray) -> Dict[str, float]:
        """
        Calculate all evaluation metrics

        Args:
            y_true: True binary labels
            y_pred_proba: Predicted probabilities for positive class

        Returns:
            Dictionary with all calculated metrics
        """
        y_true = np.asarray(y_true).astype(int)
        y_pred_proba = np.asarray(y_pred_proba, dtype=float)
        y_pred = self.predict_labels(y_pred_proba)

        metrics = {}

        # Basic classification metrics
        metrics.update(self._basic_classification_metrics(y_true, y_pred, y_pred_proba))

        # Confusion-matrix based metrics
        metrics.update(self._advanced_classification_metrics(y_true, y_pred, y_pred_proba))

        # Ranking metrics need both classes present
        if len(np.unique(y_true)) == 2:
            metrics.update(self._ranking_metrics(y_true, y_pred_proba))

        return metrics

    def _basic_classification_metrics(self, y_true: np.ndarray,
                                      y_pred: np.ndarray,
                                      y_pred_proba: np.ndarray) -> Dict[str, float]:
        """Calculate basic classification metrics"""
        return {
            'accuracy': float(accuracy_score(y_true, y_pred)),
            'precision': float(precision_score(y_true, y_pred, zero_division=0)),
            'recall': float(recall_score(y_true, y_pred, zero_division=0)),
            'f1_score': float(f1_score(y_true, y_pred, zero_division=0)),
            'log_loss': float(log_loss(y_true, y_pred_proba, labels=[0, 1]))
        }

    def _advanced_classification_metrics(self, y_true: np.ndarray,
                                         y_pred: np.ndarray,
                                         y_pred_proba: np.ndarray) -> Dict[str, float]:
        """Calculate confusion-matrix based metrics"""
        tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()

        specificity = tn / (tn + fp) if (tn + fp) > 0 else 0
        sensitivity = tp / (tp + fn) if (tp + fn) > 0 else 0

        balanced_acc = (sensitivity + specificity) / 2

        # Matthews Correlation Coefficient
        mcc_num = (tp * tn) - (fp * fn)
        mcc_den = np.sqrt(float((tp + fp) * (tp + fn) * (tn + fp) * (tn + fn)))
        mcc = mcc_num / mcc_den if mcc_den != 0 else 0

        return {
            'specificity': float(specificity),
            'sensitivity': float(sensitivity),
            'balanced_accuracy': float(balanced_acc),
            'matthews_corr_coef': float(mcc),
            'brier_score': float(brier_score_loss(y_true, y_pred_proba)),
            'true_positives': int(tp),
            'true_negatives': int(tn),
            'false_positives': int(fp),
            'false_negatives': int(fn)
        }

    def _ranking_metrics(self, y_true: np.ndarray,
                         y_pred_proba: np.ndarray) -> Dict[str, float]:
        """Calculate threshold-free ranking metrics"""
        roc_auc = roc_auc_score(y_true, y_pred_proba)
        fpr, tpr, _ = roc_curve(y_true, y_pred_proba)

        return {
            'roc_auc': float(roc_auc),
            'gini': float(2 * roc_auc - 1),
            'ks_statistic': float(np.max(tpr - fpr)),
            'precision_recall_auc': float(average_precision_score(y_true, y_pred_proba))
        }
