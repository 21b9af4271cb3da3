"""
Unit tests for the classifiers: TSP family, kernel SVM and kernel Fisher discriminant.
"""
import numpy as np
import pytest

from rankKernel.core.exceptions import ConfigError, DataMismatchError
from rankKernel.core.kernels import linear_kernel
from rankKernel.core.pair_scorer import PairScorer
from rankKernel.models.kfd import KernelFisherDiscriminant
from rankKernel.models.svm import KernelSVMClassifier, train_predict
from rankKernel.models.tsp import TopScoringPairClassifier, fit_tsp_family, majority_votes

from conftest import make_expression


def two_directions(n_per_class=10, seed=0):
    """Class 0 points along (1, 0), class 1 along (0, 1): separable by cosine similarity."""
    rng = np.random.default_rng(seed)
    a = np.column_stack([5 + rng.random(n_per_class), rng.random(n_per_class)])
    b = np.column_stack([rng.random(n_per_class), 5 + rng.random(n_per_class)])
    X = np.vstack([a, b])
    y = np.array([0] * n_per_class + [1] * n_per_class)
    return X, y


class TestMajorityVotes:
    """Test suite for majority_votes."""

    def test_tie_goes_to_first_class(self):
        less = np.array([[True, False]])
        directions = np.array(["b", "b"])
        classes = np.array(["a", "b"])

        votes = majority_votes(less, directions, classes, [1, 2])

        assert votes[0, 0] == "b"
        assert votes[1, 0] == "a"

    def test_direction_flips_vote(self):
        less = np.array([[True], [False]])
        classes = np.array([0, 1])

        np.testing.assert_array_equal(majority_votes(less, np.array([0]), classes, [1])[0], [0, 1])
        np.testing.assert_array_equal(majority_votes(less, np.array([1]), classes, [1])[0], [1, 0])


class TestTopScoringPairClassifier:
    """Test suite for TopScoringPairClassifier."""

    def test_tsp_separates_informative_pair(self):
        X, y = make_expression(30, 6, seed=2)
        model = TopScoringPairClassifier(k=1).fit(X, y)

        assert (model.pairs_[0].i, model.pairs_[0].j) == (0, 1)
        np.testing.assert_array_equal(model.predict(X), y)

    def test_apmv_uses_every_pair(self):
        X, y = make_expression(20, 5, seed=3)
        model = TopScoringPairClassifier(k=None).fit(X, y)

        assert model.k_ == 10
        assert model.predict(X).shape == (20,)

    def test_every_pair_vote_rejects_disjoint(self):
        X, y = make_expression(24, 8, seed=3)
        disjoint_scores = PairScorer(disjoint=True).score(X, y)
        assert disjoint_scores.max_k == 4

        with pytest.raises(ConfigError):
            TopScoringPairClassifier(k=None, disjoint=True).fit(X, y)
        with pytest.raises(ConfigError):
            TopScoringPairClassifier(k=None).fit(X, y, scores=disjoint_scores)
        assert TopScoringPairClassifier(k=None).fit(X, y).k_ == 28

    def test_family_shares_one_ranking(self):
        X, y = make_expression(20, 6, seed=4)
        models = fit_tsp_family(X, y, [1, 3, 5])

        assert [m.k_ for m in models] == [1, 3, 5]
        assert models[2].pairs_[:3] == models[1].pairs_

    def test_invalid_k(self):
        X, y = make_expression(20, 4, seed=5)
        with pytest.raises(ConfigError):
            TopScoringPairClassifier(k=0).fit(X, y)
        with pytest.raises(ConfigError):
            TopScoringPairClassifier(k=7).fit(X, y)

    def test_predict_before_fit(self):
        with pytest.raises(ValueError):
            TopScoringPairClassifier().predict(np.ones((2, 3)))


class TestKernelModels:
    """Test suite for the precomputed-kernel classifiers."""

    @pytest.mark.parametrize("model", [KernelSVMClassifier(C=1.0), KernelFisherDiscriminant()],
                             ids=["svm", "kfd"])
    def test_separable_kernel(self, model):
        X, y = two_directions()
        K = linear_kernel(X)

        model.fit(K, y)

        np.testing.assert_array_equal(model.predict(K), y)

    def test_kfd_decision_sign(self):
        X, y = two_directions(seed=1)
        K = linear_kernel(X)
        kfd = KernelFisherDiscriminant(regularization=1e-2).fit(K, y)
        scores = kfd.decision_function(K)

        assert np.all(scores[y == 1] > 0)
        assert np.all(scores[y == 0] < 0)

    def test_train_predict_on_kernel_rows(self):
        X, y = two_directions(seed=2)
        K = linear_kernel(X)
        train = np.r_[0:8, 10:18]
        test = np.r_[8:10, 18:20]

        predicted = train_predict(K[np.ix_(train, train)], y[train], K[np.ix_(test, train)], 1.0)

        np.testing.assert_array_equal(predicted, y[test])

    def test_non_square_training_kernel(self):
        with pytest.raises(DataMismatchError):
            KernelSVMClassifier().fit(np.ones((3, 4)), np.array([0, 1, 0]))

    def test_test_kernel_width_checked(self):
        X, y = two_directions()
        model = KernelFisherDiscriminant().fit(linear_kernel(X), y)
        with pytest.raises(DataMismatchError):
            model.predict(np.ones((2, 5)))

    def test_single_class_rejected(self):
        with pytest.raises(DataMismatchError):
            KernelFisherDiscriminant().fit(np.eye(3), np.zeros(3))
