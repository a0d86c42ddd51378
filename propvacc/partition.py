""" partition.py

Joint outcome partitions over a sequence of vaccination activities and the dose-count
distributions they aggregate into. An outcome is a pattern of 0/1 flags, one per activity,
marking whether that activity's dose was received. Every model in doses.py is built the same
way: assign a (possibly unnormalized) probability to each of the 2^n patterns, normalize by
the total, and sum the patterns by how many doses they contain. """
import itertools
import numpy as np

## For tabular output
import pandas as pd

from propvacc.errors import InternalInvariantError

## Largest acceptable deviation of a distribution's total from 1
TOLERANCE = 1e-9

class DoseDistribution(object):

	""" Probability of having received exactly 0, 1, ..., k doses. Behaves as an
	ordered sequence of (dose_count, probability) pairs. """

	def __init__(self,prop):

		prop = np.array(prop,dtype=float)
		if prop.ndim != 1 or len(prop) < 2:
			raise InternalInvariantError("a dose distribution needs at least 2 entries")
		prop.setflags(write=False)
		doses = np.arange(len(prop))
		doses.setflags(write=False)
		self.prop = prop
		self.doses = doses

	def __len__(self):
		return len(self.prop)

	def __iter__(self):
		for d, p in zip(self.doses,self.prop):
			yield int(d), float(p)

	def __getitem__(self,index):
		return list(self)[index]

	def __repr__(self):
		return "DoseDistribution({})".format(list(self))

	@property
	def max_doses(self):
		return len(self.prop)-1

	def at_least(self,k):
		""" Probability of having received k or more doses. """
		return float(np.sum(self.prop[k:]))

	def padded(self,length):
		""" The same distribution with zero mass at extra, higher dose counts. """
		if length < len(self):
			raise ValueError("cannot pad a length {} distribution to {}".format(len(self),length))
		return DoseDistribution(np.concatenate([self.prop,np.zeros((length-len(self),))]))

	def to_frame(self):
		return pd.DataFrame({"doses":self.doses,"prop":self.prop})

	def check(self,tol=TOLERANCE):

		""" Raise InternalInvariantError unless this is a valid pmf. """

		if np.any(self.prop < 0):
			raise InternalInvariantError("negative dose probability in {}".format(self))
		total = np.sum(self.prop)
		if abs(total-1.) > tol:
			raise InternalInvariantError("dose probabilities sum to {}, not 1".format(total))
		return self

class JointPartition(object):

	""" Probabilities of every received/missed pattern over a set of activities.

	activities: sequence of names, e.g. ("dose1","dose2","sia").
	terms: dict mapping each 0/1 pattern tuple to its raw probability. All 2^n
		   patterns are required. The raw total (omega) need not be 1. """

	def __init__(self,activities,terms):

		self.activities = tuple(activities)
		n = len(self.activities)
		expected = set(itertools.product((0,1),repeat=n))
		if set(terms) != expected:
			raise InternalInvariantError("partition over {} activities needs all {} patterns".format(n,2**n))

		## Rounding can leave a term a hair below zero, so
		## positivity is enforced by hand.
		self.terms = {}
		for pattern in sorted(expected,reverse=True):
			self.terms[pattern] = max(0.,float(terms[pattern]))

	def __len__(self):
		return len(self.terms)

	def __getitem__(self,pattern):
		return self.terms[tuple(pattern)]

	@property
	def omega(self):
		return sum(self.terms.values())

	def normalized(self):
		omega = self.omega
		if not omega > 0:
			raise InternalInvariantError("partition has no probability mass")
		return JointPartition(self.activities,
							  {k:v/omega for k,v in self.terms.items()})

	def marginal(self,activity):
		""" Normalized probability that the named activity's dose was received. """
		i = self.activities.index(activity)
		return sum(v for k,v in self.terms.items() if k[i])/self.omega

	def extend(self,activity,received):

		""" Add one more activity. received is either a probability or a function of
		the existing pattern giving the probability of receiving the new dose; the
		complement goes to missing it. """

		if not callable(received):
			rate = received
			received = lambda pattern: rate
		terms = {}
		for pattern, prob in self.terms.items():
			p = received(pattern)
			terms[pattern+(1,)] = prob*p
			terms[pattern+(0,)] = prob*(1.-p)
		return JointPartition(self.activities+(activity,),terms)

	def aggregate(self):

		""" Sum patterns by the number of doses received and normalize. """

		counts = np.zeros((len(self.activities)+1,))
		for pattern, prob in self.terms.items():
			counts[sum(pattern)] += prob
		omega = self.omega
		if not omega > 0:
			raise InternalInvariantError("partition has no probability mass")
		return DoseDistribution(counts/omega)

	def to_frame(self):
		df = pd.DataFrame(list(self.terms.keys()),columns=list(self.activities))
		df["prob"] = list(self.terms.values())
		df["doses"] = df[list(self.activities)].sum(axis=1)
		return df
