"""Global constants and algorithm configuration for the ride-sharing planner."""

from dataclasses import dataclass, field

#: Mean radius of the Earth used by the haversine metric (km).
EARTH_RADIUS_KM: float = 6371.0

#: Straight-line travel speed assumed when estimating leg times (km/h).
AVERAGE_SPEED_KMH: float = 30.0

#: Arrival deadline used when the configured target time cannot be parsed.
DEFAULT_TARGET_TIME: str = "08:00:00"

#: Environment variable holding the Google Directions API key.
DIRECTIONS_API_KEY_ENV: str = "GOOGLE_MAPS_API_KEY"

#: Mutation operators known to the genetic solver.
MUTATION_OPERATORS: tuple[str, ...] = (
    "swap",
    "reorder",
    "move",
    "two_opt",
    "rebalance",
)


@dataclass(frozen=True)
class FitnessConfig:
    """Weights of the solution scoring function.

    Attributes:
        distance_reward: Numerator of the ``reward / (1 + distance)`` term.
        unused_capacity_penalty: Penalty per empty seat across the fleet.
        unused_vehicle_bonus: Bonus per vehicle left without passengers.
        unassigned_penalty: Penalty per passenger not placed in any vehicle.
        average_speed_kmh: Speed used to turn route distance into minutes.
    """

    distance_reward: float = 10000.0
    unused_capacity_penalty: float = 10.0
    unused_vehicle_bonus: float = 50.0
    unassigned_penalty: float = 1000.0
    average_speed_kmh: float = AVERAGE_SPEED_KMH


@dataclass(frozen=True)
class GeneticConfig:
    """Hyperparameters for the genetic ride-sharing solver.

    Attributes:
        population_size: Number of solutions kept per generation.
        generations: Number of generations run by ``solve`` by default.
        tournament_size: Upper bound on the tournament sample size.
        mutation_rate: Probability that a child is mutated.
        mutation_operators: Operators drawn uniformly when mutating. Any of
            ``MUTATION_OPERATORS``.
        max_stagnant_generations: Stop after this many generations without a
            better best score. ``None`` always runs every generation.
        heuristic_seeding: Replace the first random individuals of the
            initial population with a greedy and an even-distribution seed.
        fitness: Weights of the scoring function.
    """

    population_size: int = 200
    generations: int = 150
    tournament_size: int = 5
    mutation_rate: float = 0.3
    mutation_operators: tuple[str, ...] = ("swap", "reorder", "move")
    max_stagnant_generations: int | None = None
    heuristic_seeding: bool = False
    fitness: FitnessConfig = field(default_factory=FitnessConfig)

    def __post_init__(self) -> None:
        if self.population_size < 1:
            raise ValueError("population_size must be at least 1.")
        if self.generations < 0:
            raise ValueError("generations must not be negative.")
        if self.tournament_size < 1:
            raise ValueError("tournament_size must be at least 1.")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError("mutation_rate must lie in [0, 1].")
        if not self.mutation_operators:
            raise ValueError("At least one mutation operator is required.")
        unknown = set(self.mutation_operators) - set(MUTATION_OPERATORS)
        if unknown:
            raise ValueError(
                f"Unknown mutation operator(s): {', '.join(sorted(unknown))}"
            )
