""" uncertainty.py

Monte Carlo propagation of uncertainty in measured coverage through the dose models.
Coverage of each activity is drawn from a Beta distribution (see beta.py) and the
proportion immune is computed for every draw. """
import numpy as np
import pandas as pd

from propvacc.errors import ConfigurationError
from propvacc.immunity import proportion_immune, proportion_immune_with_sia

def sample_coverage(params,num_samples=1000):

	""" Draw coverage samples. params is a BetaParams or (shape1, shape2) pair. """

	shape1, shape2 = params
	return np.random.beta(shape1,shape2,size=(num_samples,))

def sample_proportion_immune(coverage_params,effectiveness,sia_params=None,
							 independent=False,num_samples=1000):

	""" Samples of the proportion immune given Beta distributed coverage.

	coverage_params: list of 2 or 3 (shape1, shape2) pairs, one per routine dose.
	effectiveness: as in immunity.proportion_immune, with one extra entry if
				   sia_params is given.
	sia_params: (shape1, shape2) for the SIA coverage, or None for no SIA.
	num_samples: int, number of draws. """

	if len(coverage_params) not in (2,3):
		raise ConfigurationError("only 2 or 3 routine doses are supported, got {}".format(len(coverage_params)))

	## Draw all the coverage samples up front, shape
	## (num_samples, num_doses).
	V = np.array([sample_coverage(p,num_samples) for p in coverage_params]).T
	if sia_params is not None:
		S = sample_coverage(sia_params,num_samples)

	samples = np.zeros((num_samples,))
	for i in range(num_samples):
		if sia_params is None:
			samples[i] = proportion_immune(V[i],effectiveness,independent)
		else:
			samples[i] = proportion_immune_with_sia(V[i],S[i],effectiveness,independent)
	return samples

def summarize_samples(samples,quantiles=(0.025,0.5,0.975)):

	""" Mean and quantiles of a set of samples, as a series indexed by
	"mean" and the quantile levels. """

	samples = np.asarray(samples,dtype=float)
	summary = pd.Series(np.quantile(samples,quantiles),index=list(quantiles))
	return pd.concat([pd.Series({"mean":samples.mean()}),summary])
