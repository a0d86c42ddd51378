""" immunity.py

Proportion of the population immune due to vaccination, given coverage of each
vaccination activity and the effectiveness of each number of doses.

Under dependence the proportion immune is sum_j effectiveness_j * Pr(j doses), with the
dose-count distribution from doses.py. Under independence it is
1 - prod_j (1 - effectiveness_j * V_j) over the routine doses and the SIA. """
import numpy as np

from propvacc.errors import check_coverage, ConfigurationError, InvalidArgumentError
from propvacc.doses import dose_distribution, dose_distribution_with_sia

def immune_from_distribution(distribution,effectiveness):

	""" Dependence model proportion immune. effectiveness has one entry per dose count
	from 1 up; zero doses confer no immunity. """

	effectiveness = np.asarray(effectiveness,dtype=float)
	if len(effectiveness) != len(distribution)-1:
		raise InvalidArgumentError("expected {} effectiveness values for {} dose counts, got {}".format(
								   len(distribution)-1,len(distribution),len(effectiveness)))
	return float(np.dot(effectiveness,distribution.prop[1:]))

def independent_immunity(coverage,effectiveness):

	""" Independence model proportion immune, 1 - prod_j (1 - e_j V_j). """

	coverage = np.asarray(coverage,dtype=float)
	effectiveness = np.asarray(effectiveness,dtype=float)
	return float(1.-np.prod(1.-effectiveness*coverage))

def _check_inputs(V,effectiveness,extra=0):

	V = list(V)
	if len(V)+extra != len(effectiveness):
		raise InvalidArgumentError("length of coverage ({}) and effectiveness ({}) must be equal".format(
								   len(V)+extra,len(effectiveness)))
	if len(V) not in (2,3):
		raise ConfigurationError("only 2 or 3 routine doses are supported, got {}".format(len(V)))
	return [check_coverage(v,"V[{}]".format(i)) for i,v in enumerate(V)]

def proportion_immune(V,effectiveness,independent=False):

	""" Proportion immune from routine vaccination.

	V: sequence of 2 or 3 routine coverages.
	effectiveness: sequence of the same length. Under dependence, entry j is the
				   effectiveness of having j+1 doses; under independence, of dose j+1.
	independent: bool, whether receipt of each dose ignores prior doses. """

	V = _check_inputs(V,effectiveness)
	if independent:
		return independent_immunity(V,effectiveness)
	return immune_from_distribution(dose_distribution(*V),effectiveness)

def proportion_immune_with_sia(V,S,effectiveness,independent=False):

	""" Proportion immune from routine vaccination plus one SIA campaign with
	coverage S. effectiveness has len(V)+1 entries, the last one for the highest
	dose count (dependence) or for the SIA dose (independence). """

	V = _check_inputs(V,effectiveness,extra=1)
	S = check_coverage(S,"S")
	if independent:
		return independent_immunity(V+[S],effectiveness)
	v3 = V[2] if len(V) == 3 else None
	return immune_from_distribution(dose_distribution_with_sia(V[0],V[1],v3,S=S),effectiveness)
