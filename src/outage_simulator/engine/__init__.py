"""Engine — generator failure chain, storage bins, survival and fuel simulation."""

from outage_simulator.engine.markov import (
    generator_output,
    generator_states,
    markov_matrix,
    starting_probabilities,
    transition_probability,
)
from outage_simulator.engine.storage_bins import (
    StorageDimension,
    bin_storage_charge,
    num_storage_bins_default,
    shift_gen_storage_prob_matrix,
    storage_bin_shift,
)
from outage_simulator.engine.max_generation import maximum_generation
from outage_simulator.engine.derived import DerivedInputs, StorageInputs, compute_derived_inputs
from outage_simulator.engine.survival import survival_gen_only, survival_with_storage
from outage_simulator.engine.fuel import fuel_dispatch_order, fuel_use
from outage_simulator.engine.summary import process_reliability_results
from outage_simulator.engine.orchestrator import (
    SystemScenario,
    backup_reliability_single_run,
    return_backup_reliability,
    run_reliability,
    system_scenarios,
)

__all__ = [
    # Generator failure chain
    "generator_states",
    "transition_probability",
    "markov_matrix",
    "starting_probabilities",
    "generator_output",
    # Storage
    "StorageDimension",
    "bin_storage_charge",
    "num_storage_bins_default",
    "storage_bin_shift",
    "shift_gen_storage_prob_matrix",
    "maximum_generation",
    # Inputs
    "DerivedInputs",
    "StorageInputs",
    "compute_derived_inputs",
    # Simulation
    "survival_gen_only",
    "survival_with_storage",
    "fuel_dispatch_order",
    "fuel_use",
    # Aggregation
    "SystemScenario",
    "system_scenarios",
    "backup_reliability_single_run",
    "return_backup_reliability",
    "process_reliability_results",
    "run_reliability",
]
