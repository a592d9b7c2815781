"""
Population model parameters, edited as a table.

Builds a small nested model with declared parameters, prints its parameter
table, rescales values through a pandas DataFrame, groups them for a UI and
finally strips the parameters to get a plain model back.

Run with ``python examples/population.py``.
"""

import logging
from dataclasses import dataclass

from paramstate import Model, map_over_leaves, param_field, params_of, print_params

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Growth:
    """Logistic growth."""
    rate: float = param_field(0.1, description="Intrinsic growth rate", bounds=(0.0, 1.0))
    capacity: float = param_field(100.0, description="Carrying capacity", bounds=(10.0, 1000.0))


@dataclass(frozen=True)
class Mortality:
    baseline: float = param_field(0.02, description="Background death rate", bounds=(0.0, 0.5))
    # Days
    lifespan: float = param_field(2.0, description="Mean lifespan", units=365.0)


@dataclass(frozen=True)
class Population:
    """Whole model; nested blocks inherit the ``group`` they are declared with."""
    growth: Growth = param_field(default_factory=Growth, group="growth")
    mortality: Mortality = param_field(default_factory=Mortality, group="mortality")
    initial_size: int = param_field(10, description="Initial population size", group="state")
    name: str = "example"


def main() -> Population:
    model = Model(params_of(Population()))
    print_params(model)

    # Edit in pandas, then write every column back
    df = model.to_dataframe()
    df.loc[df['fieldname'] == 'rate', 'val'] = 0.25
    model.update(df)
    logger.info(f"Growth rate is now {model.parent.growth.rate.val}")

    # A slider UI would build one panel per group
    grouped = model.group('group', 'fieldname')
    panels = map_over_leaves(lambda p: (p.val, p.bounds), grouped)
    for group, sliders in panels.items():
        print(group, dict(sliders))

    plain = model.strip_params()
    print(plain)
    return plain


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    main()
