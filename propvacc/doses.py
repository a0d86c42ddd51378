""" doses.py

Distribution of the number of vaccine doses received given routine coverage of 2 or 3 doses
and, optionally, one supplemental immunization activity (SIA). Receipt of doses is dependent:
people who received dose 1 are the most likely to receive dose 2, those who received doses 1
and 2 are the most likely to receive dose 3, and the SIA reaches people with at least one
prior dose first.

Each model partitions the population over every received/missed pattern (see partition.py),
normalizes, and counts doses. The partitions are approximate where a later coverage exceeds
an earlier one, which is why the raw totals are renormalized rather than assumed to be 1. """
from propvacc.errors import check_coverage, InvalidArgumentError
from propvacc.dropout import dropout_rate, surplus
from propvacc.partition import JointPartition

ROUTINE = ("dose1","dose2","dose3")
SIA = "sia"

class RoutineCases(object):

	""" Dropout rates, surpluses and the case predicates that follow from them
	for one set of routine coverages. Everything is recomputed per instance, so
	no branch can see a rate left over from another set of inputs.

	v1, v2: floats, coverage of routine doses 1 and 2.
	v3: float or None, coverage of routine dose 3. """

	def __init__(self,v1,v2,v3=None):

		self.v1 = v1
		self.v2 = v2
		self.v3 = v3

		## Dose 1 to dose 2
		self.d12 = dropout_rate(v1,v2)
		self.s12 = surplus(v1,v2)
		self.second_exceeds_first = self.s12 > 0

		## Pr(dose 1 and dose 2)
		self.p12 = v1*(1.-self.d12)

		## Doses 1 and 2 to dose 3
		if v3 is None:
			self.d23 = 0.
			self.s23 = 0.
			self.third_exceeds_pair = False
		else:
			self.d23 = dropout_rate(self.p12,v3)
			self.s23 = surplus(self.p12,v3)
			self.third_exceeds_pair = self.s23 > 0

	@property
	def num_doses(self):
		return 2 if self.v3 is None else 3

def two_dose_terms(c):

	v1, d12, s12 = c.v1, c.d12, c.s12
	return {(1,1):v1*(1.-d12),
			(1,0):v1*d12,
			(0,1):(1.-v1)*s12 if c.second_exceeds_first else 0.,
			(0,0):(1.-v1)*(1.-s12) if c.second_exceeds_first else 1.-v1}

def three_dose_terms(c):

	v1, v2 = c.v1, c.v2
	d12, s12, p12 = c.d12, c.s12, c.p12
	d23, s23 = c.d23, c.s23

	## Dose 3 goes first to those with doses 1 and 2, then its surplus
	## to those who missed dose 2, then whatever is left to those
	## who missed dose 1.
	terms = {(1,1,1):p12*(1.-d23),
			 (1,1,0):p12*d23,
			 (1,0,1):v1*d12*s23,
			 (1,0,0):v1*d12*(1.-s23),
			 (0,1,1):(1.-v1)*s12*s23,
			 (0,1,0):(1.-v1)*s12*(1.-s23),
			 (0,0,0):(1.-v1)*(1.-s12)*(1.-s23)}
	if c.third_exceeds_pair:
		remaining = max(0.,s23-v1*d12-(1.-v1)*(v2-v1))
		if c.second_exceeds_first:
			terms[(0,0,1)] = (1.-v1)*s12*remaining
		else:
			terms[(0,0,1)] = (1.-v1)*remaining
	else:
		terms[(0,0,1)] = 0.
	return terms

def routine_partition(v1,v2,v3=None):

	""" Normalized joint partition over the routine doses.

	v1, v2: coverage of routine doses 1 and 2.
	v3: coverage of routine dose 3, or None for a two dose schedule. """

	v1 = check_coverage(v1,"v1")
	v2 = check_coverage(v2,"v2")
	if v3 is not None:
		v3 = check_coverage(v3,"v3")

	cases = RoutineCases(v1,v2,v3)
	if cases.num_doses == 2:
		terms = two_dose_terms(cases)
	else:
		terms = three_dose_terms(cases)
	return JointPartition(ROUTINE[:cases.num_doses],terms).normalized()

def sia_partition(v1,v2,v3=None,S=None):

	""" Normalized joint partition over the routine doses and one SIA. The SIA
	is dependent on having at least one routine dose, with the same dropout rule
	as between routine doses. """

	if S is None:
		raise InvalidArgumentError("SIA coverage S is required")
	v1 = check_coverage(v1,"v1")
	v2 = check_coverage(v2,"v2")
	if v3 is not None:
		v3 = check_coverage(v3,"v3")
	S = check_coverage(S,"S")

	## Pr(at least one routine dose) is the reference
	## population for the SIA.
	routine = routine_partition(v1,v2,v3)
	p_prior = routine.aggregate().at_least(1)

	## A campaign with no coverage reaches no one, even when
	## nobody had a routine dose to drop out from.
	if S == 0:
		d_S = 1.
	else:
		d_S = dropout_rate(p_prior,S)
	return routine.extend(SIA,1.-d_S).normalized()

def dose_distribution(v1,v2,v3=None):

	""" Proportions of the population with 0, 1, 2 (and 3 if v3 is given) routine
	doses, as a DoseDistribution. """

	return routine_partition(v1,v2,v3).aggregate()

def dose_distribution_with_sia(v1,v2,v3=None,S=None):

	""" Proportions of the population with 0 through 3 (or 4 if v3 is given) doses
	once the SIA dose with coverage S is counted. """

	return sia_partition(v1,v2,v3,S).aggregate()
