import numpy as np
import pytest
from scipy.stats import beta as beta_dist

from propvacc.beta import BetaParams, age_breaks, fit_beta, penalized_logit, smooth_by_age
from propvacc.errors import ConfigurationError, InvalidArgumentError

QUANTILES = [0.025,0.25,0.5,0.75,0.975]


def test_moments():
	params = fit_beta(mu=0.8,sigma=0.01)
	assert isinstance(params,BetaParams)
	assert params.shape1 == pytest.approx(12.)
	assert params.shape2 == pytest.approx(3.)
	assert beta_dist.mean(*params) == pytest.approx(0.8)
	assert beta_dist.var(*params) == pytest.approx(0.01)


def test_moments_are_vectorized():
	params = fit_beta(mu=np.array([0.8,0.5]),sigma=np.array([0.01,0.05]))
	assert params.shape1 == pytest.approx([12.,2.])
	assert params.shape2 == pytest.approx([3.,2.])


def test_moments_reject_impossible_variance():
	with pytest.raises(InvalidArgumentError):
		fit_beta(mu=0.5,sigma=0.3)
	with pytest.raises(InvalidArgumentError):
		fit_beta(mu=1.,sigma=0.01)


def test_quantiles():
	probs = beta_dist.ppf(QUANTILES,12.,3.)
	params = fit_beta(quantiles=QUANTILES,probs=probs)
	assert params.shape1 == pytest.approx(12.,rel=0.02)
	assert params.shape2 == pytest.approx(3.,rel=0.02)


def test_quantiles_must_match_probs():
	with pytest.raises(InvalidArgumentError):
		fit_beta(quantiles=QUANTILES,probs=[0.5,0.6])


def test_maximum_likelihood():
	np.random.seed(1)
	probs = np.random.beta(12.,3.,size=(5000,))
	params = fit_beta(probs=probs,verbose=True)
	assert params.shape1 == pytest.approx(12.,rel=0.1)
	assert params.shape2 == pytest.approx(3.,rel=0.1)


def test_maximum_likelihood_needs_interior_proportions():
	with pytest.raises(InvalidArgumentError):
		fit_beta(probs=[0.,0.5,0.7])


@pytest.mark.parametrize("kwargs",[{},{"mu":0.5},{"sigma":0.1,"probs":[0.5]},{"mu":0.5,"sigma":0.01,"probs":[0.5]}])
def test_unsupported_argument_combinations(kwargs):
	with pytest.raises(ConfigurationError):
		fit_beta(**kwargs)


def test_age_breaks():
	age = np.array([0.5,3.,12.,29.2])
	assert list(age_breaks(age)) == [0.,30.]
	assert list(age_breaks(age,12)) == [0.,12.,30.]
	assert list(age_breaks(age,[12,6])) == [0.,6.,12.,30.]
	assert list(age_breaks(age,np.arange(0,61,30))) == [0.,30.,60.]


def synthetic_survey(size=3000,seed=2):
	np.random.seed(seed)
	age = np.random.uniform(0,60,size=(size,))
	age[-1] = 59.5
	vaccinated = np.random.binomial(1,0.3+0.6*age/60.).astype(float)
	return age, vaccinated


def test_smooth_by_age_groups():
	age, vaccinated = synthetic_survey()
	df = smooth_by_age(age,vaccinated,breaks=np.arange(0,61,6))
	assert list(df.columns) == ["age","n","mu","sigma","shape1","shape2"]
	assert len(df) == 10
	assert df["age"].iloc[0] == "0-6"
	assert df["n"].sum() == len(age)
	assert ((df["mu"] > 0) & (df["mu"] < 1)).all()
	assert (df["sigma"] > 0).all()
	assert ((df["shape1"] > 0) & (df["shape2"] > 0)).all()
	assert df["mu"].iloc[-1] > df["mu"].iloc[0]
	assert np.allclose(df["shape1"]/(df["shape1"]+df["shape2"]),df["mu"])


def test_single_group_matches_pooled_proportion():
	age, vaccinated = synthetic_survey(size=500)
	df = smooth_by_age(age,vaccinated)
	assert len(df) == 1
	assert df["age"].iloc[0] == "0-60"
	assert df["mu"].iloc[0] == pytest.approx(vaccinated.mean(),abs=1e-4)


def test_incomplete_observations_are_dropped():
	age, vaccinated = synthetic_survey(size=200)
	age[:5] = np.nan
	vaccinated[5:8] = np.nan
	df = smooth_by_age(age,vaccinated,breaks=12,verbose=True)
	assert df["n"].sum() == 192
	assert list(df["age"]) == ["0-12","12-60"]


def test_all_vaccinated_group_stays_finite():
	age = np.array([1.,2.,3.,13.,14.,15.,16.])
	vaccinated = np.array([1.,1.,1.,0.,1.,0.,1.])
	df = smooth_by_age(age,vaccinated,breaks=12)
	assert np.isfinite(df[["mu","sigma","shape1","shape2"]].values).all()
	assert df["mu"].iloc[0] > df["mu"].iloc[1]


def test_smooth_by_age_validates_records():
	with pytest.raises(InvalidArgumentError):
		smooth_by_age([1.,2.],[1.,2.])
	with pytest.raises(InvalidArgumentError):
		smooth_by_age([1.,2.],[1.])
	with pytest.raises(InvalidArgumentError):
		smooth_by_age([np.nan],[1.])


def test_penalty_pulls_groups_together():
	k = np.array([10.,0.,10.])
	n = np.array([10.,10.,10.])
	loose, _ = penalized_logit(k,n,correlation=0.1)
	tight, _ = penalized_logit(k,n,correlation=3.)
	assert np.ptp(tight) < np.ptp(loose)
