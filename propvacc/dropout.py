""" dropout.py

Dropout between sequential vaccination activities. Receipt of a later dose is assumed
to depend on an earlier reference coverage: if the later coverage falls short of the
reference, the shortfall is the fraction of the reference population that dropped out.
If the later coverage exceeds it, nobody dropped out and the excess (the surplus) went
to people outside the reference population. """

## Rates this close to 0 or 1 are treated as exactly on
## the boundary, so the case splits downstream agree with them.
EPS = 1e-12

def snap(x,eps=EPS):
	if x < eps:
		return 0.
	if x > 1.-eps:
		return 1.
	return x

def dropout_rate(reference,later):

	""" Conditional probability of missing the later activity given membership
	in the reference population.

	reference: float, coverage of the earlier activity (or activities).
	later: float, coverage of the later activity. """

	## No dropout is possible from an empty reference
	## population, or when the later activity covers it.
	if reference <= 0 or later >= reference:
		return 0.
	return snap((reference-later)/reference)

def surplus(reference,later):

	""" Coverage of the later activity beyond what the reference population
	can absorb, which is redistributed to those who missed the reference. """

	if later <= reference:
		return 0.
	return snap(later-reference)
