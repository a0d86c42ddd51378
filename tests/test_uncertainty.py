import numpy as np
import pytest

from propvacc.beta import BetaParams
from propvacc.errors import ConfigurationError
from propvacc.uncertainty import sample_coverage, sample_proportion_immune, summarize_samples


def test_sample_coverage():
	np.random.seed(3)
	samples = sample_coverage(BetaParams(40.,1.),num_samples=2000)
	assert samples.shape == (2000,)
	assert ((samples >= 0) & (samples <= 1)).all()
	assert samples.mean() == pytest.approx(40./41.,abs=0.01)


def test_routine_samples_are_reproducible():
	np.random.seed(4)
	first = sample_proportion_immune([(40.,1.),(4.,2.)],[0.93,0.97],num_samples=200)
	np.random.seed(4)
	second = sample_proportion_immune([(40.,1.),(4.,2.)],[0.93,0.97],num_samples=200)
	assert np.array_equal(first,second)
	assert ((first >= 0) & (first <= 1)).all()


def test_campaign_samples():
	np.random.seed(5)
	routine = sample_proportion_immune([(40.,1.),(4.,2.)],[0.84,0.941],num_samples=300)
	np.random.seed(5)
	with_sia = sample_proportion_immune([(40.,1.),(4.,2.)],[0.84,0.941,0.99],
										sia_params=(20.,2.),num_samples=300)
	assert with_sia.shape == (300,)
	assert with_sia.mean() > routine.mean()


def test_independent_samples():
	np.random.seed(6)
	samples = sample_proportion_immune([(9.,1.),(8.,2.),(7.,3.)],[0.85,0.9,0.95],
									   independent=True,num_samples=100)
	assert ((samples >= 0) & (samples <= 1)).all()


def test_unsupported_number_of_doses():
	with pytest.raises(ConfigurationError):
		sample_proportion_immune([(40.,1.)],[0.93])


def test_summarize_samples():
	summary = summarize_samples(np.linspace(0,1,101))
	assert summary["mean"] == pytest.approx(0.5)
	assert summary[0.5] == pytest.approx(0.5)
	assert summary[0.025] == pytest.approx(0.025)
	assert summary[0.975] == pytest.approx(0.975)
