"""Tests for trust score regression models."""

import io
import threading

import joblib
import numpy as np
import pytest

from trustscore.ml.synthetic import generate
from trustscore.ml.trust_model import (
    ARTIFACT_FORMAT,
    GradientBoostingTrustModel,
    LinearTrustModel,
    RandomForestTrustModel,
)
from trustscore.scoring.errors import (
    InvalidTrainingSetError,
    PersistenceError,
    UntrainedModelError,
)
from trustscore.scoring.models import FeatureVector


@pytest.fixture(scope="module")
def probe_vectors():
    """Twenty vectors spanning all three risk profiles."""
    return [s.features for s in generate(60, seed=99)[::3]]


@pytest.fixture
def small_model():
    """Small untrained random forest."""
    return RandomForestTrustModel(n_estimators=10)


class TestTraining:
    """Test fitting and prediction."""

    def test_untrained_predict_raises(self, small_model):
        assert not small_model.is_trained
        with pytest.raises(UntrainedModelError):
            small_model.predict(FeatureVector())

    def test_untrained_persist_raises(self, small_model):
        with pytest.raises(UntrainedModelError):
            small_model.persist()

    def test_empty_training_set(self, small_model):
        with pytest.raises(InvalidTrainingSetError):
            small_model.train([])
        assert not small_model.is_trained

    def test_wrong_feature_count(self, small_model):
        with pytest.raises(InvalidTrainingSetError):
            small_model.train([([0.1, 0.2, 3.0], 50.0)])

    def test_non_finite_values(self, small_model):
        row = FeatureVector().to_array()
        with pytest.raises(InvalidTrainingSetError):
            small_model.train([(row, float("nan"))])

    def test_malformed_sample(self, small_model):
        with pytest.raises(InvalidTrainingSetError):
            small_model.train([object()])

    def test_train_from_pairs(self, small_model):
        """Test training from (features, label) tuples."""
        pairs = [(s.features, s.label) for s in generate(90, seed=1)]
        pairs += [(s.features.to_array(), s.label) for s in generate(30, seed=2)]
        small_model.train(pairs)

        assert small_model.is_trained
        assert small_model.num_training_samples == 120
        assert small_model.trained_at is not None

    def test_predictions_in_range(self, trained_model, probe_vectors):
        for vector in probe_vectors:
            assert 0.0 <= trained_model.predict(vector) <= 100.0

    def test_predict_many_matches_predict(self, trained_model, probe_vectors):
        batch = trained_model.predict_many(probe_vectors)
        single = [trained_model.predict(v) for v in probe_vectors]
        np.testing.assert_allclose(batch, single)

    def test_predict_many_empty(self, trained_model):
        assert trained_model.predict_many([]).shape == (0,)

    def test_risky_user_scores_lower(self, trained_model):
        """Test that the model ranks an obviously risky user below a clean one."""
        clean = FeatureVector(avg_device_risk=15.0, network_risk_score=10.0, seconds_since_last_login=3600)
        risky = FeatureVector(
            failed_login_rate=0.5,
            night_access_rate=0.6,
            login_frequency_24h=30,
            avg_device_risk=85.0,
            unpatched_device_ratio=0.8,
            antivirus_disabled_ratio=0.7,
            network_risk_score=75.0,
            location_change_score=80.0,
            time_anomaly_score=70.0,
            seconds_since_last_login=90000,
        )
        assert trained_model.predict(clean) > 70.0
        assert trained_model.predict(risky) < 40.0

    def test_confidence(self, trained_model, probe_vectors):
        score, confidence = trained_model.predict_with_confidence(probe_vectors[0])
        assert score == pytest.approx(trained_model.predict(probe_vectors[0]))
        assert 0.0 <= confidence <= 1.0

    def test_retrain_replaces_fit(self, small_model):
        small_model.train(generate(60, seed=1))
        first = small_model.trained_at
        small_model.train(generate(90, seed=2))
        assert small_model.num_training_samples == 90
        assert small_model.trained_at >= first

    def test_concurrent_predict_during_retrain(self, probe_vectors):
        """Test that readers always see a complete fit while a writer retrains."""
        model = RandomForestTrustModel(n_estimators=5)
        model.train(generate(60, seed=1))
        errors = []

        def reader():
            try:
                for _ in range(50):
                    for vector in probe_vectors[:3]:
                        assert 0.0 <= model.predict(vector) <= 100.0
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for seed in range(3):
            model.train(generate(60, seed=seed))
        for t in threads:
            t.join()

        assert errors == []

    def test_spawn_is_untrained_copy(self, trained_model):
        copy = trained_model.spawn()
        assert not copy.is_trained
        assert copy.n_estimators == trained_model.n_estimators
        assert copy.model_name == trained_model.model_name


class TestPersistence:
    """Test serialization and restore."""

    def test_round_trip_identical(self, trained_model, probe_vectors):
        """Test that a restored model predicts exactly like the original."""
        restored = RandomForestTrustModel()
        restored.restore(trained_model.persist())

        assert restored.is_trained
        assert restored.num_training_samples == 3000
        np.testing.assert_array_equal(
            restored.predict_many(probe_vectors), trained_model.predict_many(probe_vectors)
        )

    def test_restore_carries_metadata(self, small_model):
        small_model.model_name = "rf_test"
        small_model.model_version = "2.1.0"
        small_model.train(generate(30, seed=1))

        restored = RandomForestTrustModel()
        restored.restore(small_model.persist())
        assert restored.model_name == "rf_test"
        assert restored.model_version == "2.1.0"

    def test_corrupt_data_keeps_state(self, small_model, probe_vectors):
        small_model.train(generate(60, seed=1))
        before = small_model.predict_many(probe_vectors)

        with pytest.raises(PersistenceError):
            small_model.restore(b"not a model")

        np.testing.assert_array_equal(small_model.predict_many(probe_vectors), before)

    def test_corrupt_data_on_untrained(self, small_model):
        with pytest.raises(PersistenceError):
            small_model.restore(b"")
        assert not small_model.is_trained

    def test_wrong_algorithm(self, trained_model):
        with pytest.raises(PersistenceError, match="random_forest"):
            LinearTrustModel().restore(trained_model.persist())

    @pytest.mark.parametrize(
        "missing", ["estimator", "trained_at", "num_samples", "model_name", "model_version"]
    )
    def test_incomplete_artifact_keeps_state(self, trained_model, probe_vectors, missing):
        """Test that a tagged artifact missing a field is rejected before swapping state."""
        model = RandomForestTrustModel(n_estimators=10)
        model.train(generate(60, seed=1))
        before = model.predict_many(probe_vectors)

        payload = joblib.load(io.BytesIO(trained_model.persist()))
        del payload[missing]
        buffer = io.BytesIO()
        joblib.dump(payload, buffer)

        with pytest.raises(PersistenceError, match=missing):
            model.restore(buffer.getvalue())

        assert model.num_training_samples == 60
        np.testing.assert_array_equal(model.predict_many(probe_vectors), before)

    def test_artifact_without_estimator_fields(self):
        buffer = io.BytesIO()
        joblib.dump(
            {
                "format": ARTIFACT_FORMAT,
                "algorithm": "random_forest",
                "feature_names": FeatureVector.feature_names(),
            },
            buffer,
        )
        model = RandomForestTrustModel()

        with pytest.raises(PersistenceError):
            model.restore(buffer.getvalue())
        assert not model.is_trained

    def test_artifact_with_non_estimator(self, trained_model):
        payload = joblib.load(io.BytesIO(trained_model.persist()))
        payload["estimator"] = "not an estimator"
        buffer = io.BytesIO()
        joblib.dump(payload, buffer)
        model = RandomForestTrustModel()

        with pytest.raises(PersistenceError, match="fitted estimator"):
            model.restore(buffer.getvalue())
        assert not model.is_trained


class TestOtherAlgorithms:
    """Test the alternative regressors."""

    @pytest.mark.parametrize(
        "model",
        [GradientBoostingTrustModel(n_estimators=30), LinearTrustModel()],
        ids=["gradient_boosting", "linear"],
    )
    def test_train_predict_restore(self, model, probe_vectors):
        model.train(generate(300, seed=4))
        scores = model.predict_many(probe_vectors)
        assert np.all((scores >= 0.0) & (scores <= 100.0))

        _, confidence = model.predict_with_confidence(probe_vectors[0])
        assert confidence is None

        restored = model.spawn()
        restored.restore(model.persist())
        np.testing.assert_array_equal(restored.predict_many(probe_vectors), scores)

    def test_default_names(self):
        assert GradientBoostingTrustModel().model_name == "gradient_boosting_v1"
        assert LinearTrustModel().model_name == "linear_v1"
        assert "untrained" in repr(LinearTrustModel())
