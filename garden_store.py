"""
garden_store.py — Coordinating store between the engines and the repository.

GardenStore owns a GardenState (plants, active session, seeds, slots,
last session results, gacha allowance) and an injected repository
(the database module in production). Each action follows the same
sequence under one lock:

1. Re-read plants, the active session, seeds and slots from the
   repository, since another process (`flask watch`) may have written
2. Read the clock once
3. Run the pure engine functions on the in-memory state
4. Persist the new values (batch writes are single transactions)
5. Swap the new values into the state

User-facing rejections come back as (None, error_message) tuples for the
routes to report. InvalidTransitionError from the session engine is a
sequencing bug and is allowed to propagate, except when the repository
reports that another process already finished the session.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

import care_engine
import focus_engine
import gacha_engine
from clock import new_id, now_ms
from errors import GardenActionError, InvalidTransitionError
from models import FocusSession, Plant, PlantSessionResult, Seed, SessionMinutes, SessionSummary
from rng import RNG, default_rng
from species import get_species

logger = logging.getLogger(__name__)


@dataclass
class GardenState:
    """Everything the UI needs, loaded from the repository."""
    plants: List[Plant] = field(default_factory=list)
    active_session: Optional[FocusSession] = None
    seeds: List[Seed] = field(default_factory=list)
    max_slots: int = 0
    last_session: Optional[FocusSession] = None
    last_results: List[PlantSessionResult] = field(default_factory=list)
    free_draws_remaining: int = gacha_engine.FREE_DRAWS_PER_DAY
    last_draw: Optional[Seed] = None


class GardenStore:
    """Application state plus the operations that change it."""

    def __init__(self, repo, rng: RNG = default_rng, clock: Callable[[], int] = now_ms,
                 default_max_slots: Optional[int] = None):
        self.repo = repo
        self.default_max_slots = default_max_slots
        self.rng = rng
        self.clock = clock
        self.state = GardenState()
        self._lock = threading.RLock()

    # ========================================
    # Loading and lookups
    # ========================================

    def load(self):
        """Reload the whole state from the repository."""
        with self._lock:
            self._sync()
            self._refresh_gacha_status(self.clock())
        return self.state

    def _sync(self):
        """Replace the persisted parts of the state with what the repository holds."""
        self.state.plants = self.repo.list_plants()
        self.state.active_session = self.repo.get_active_session()
        self.state.seeds = self.repo.list_seeds()
        self.state.max_slots = self.repo.get_max_slots()

    def get_plant(self, plant_id: str) -> Optional[Plant]:
        for plant in self.state.plants:
            if plant.id == plant_id:
                return plant
        return None

    def sorted_plants(self) -> List[Plant]:
        """Plants by growth points, most grown first."""
        return sorted(self.state.plants, key=lambda p: p.growth_points, reverse=True)

    def occupied_slots(self) -> List[int]:
        return sorted(p.slot_index for p in self.state.plants)

    def free_slots(self) -> List[int]:
        taken = set(self.occupied_slots())
        return [i for i in range(self.state.max_slots) if i not in taken]

    def _replace_plant(self, plant: Plant):
        self.state.plants = [plant if p.id == plant.id else p for p in self.state.plants]

    def _require_plant(self, plant_id: str) -> Plant:
        plant = self.get_plant(plant_id)
        if plant is None:
            raise GardenActionError("Plant not found.")
        return plant

    def _rejected(self, action: str, error: GardenActionError):
        logger.info("Rejected %s: %s", action, error)
        return None, str(error)

    # ========================================
    # Planting
    # ========================================

    def plant_seed(self, seed_id: str, slot_index: int, nickname: Optional[str] = None) -> Tuple[Optional[Plant], Optional[str]]:
        """
        Plant a seed into an empty slot.

        Returns:
            (plant, None) on success, or (None, error_message) on failure.
        """
        with self._lock:
            self._sync()
            try:
                if self.state.active_session is not None:
                    raise GardenActionError("Cannot plant during a focus session.")

                seed = next((s for s in self.state.seeds if s.id == seed_id), None)
                if seed is None:
                    raise GardenActionError("Seed not found.")
                if get_species(seed.species_id) is None:
                    raise GardenActionError(f"Unknown species: {seed.species_id}")
                if slot_index < 0 or slot_index >= self.state.max_slots:
                    raise GardenActionError(f"Slot {slot_index} is out of range.")
                if slot_index in self.occupied_slots():
                    raise GardenActionError(f"Slot {slot_index} is already occupied.")
            except GardenActionError as e:
                return self._rejected('planting', e)

            current_time = self.clock()
            care = care_engine.default_care_state(current_time)
            plant = Plant(
                id=new_id(),
                species_id=seed.species_id,
                slot_index=slot_index,
                nickname=nickname or None,
                growth_points=0,
                mutations=(),
                planted_at=current_time,
                updated_at=current_time,
                water_level=care.water_level,
                nutrition_level=care.nutrition_level,
                health=care.health,
                disease_type=care.disease_type,
                last_watered_at=care.last_watered_at,
                last_fertilized_at=care.last_fertilized_at,
                last_care_check_at=care.last_care_check_at,
                is_dead=care.is_dead,
            )

            self.repo.plant_seed(plant, seed.id)
            self.state.plants = sorted(self.state.plants + [plant], key=lambda p: p.slot_index)
            self.state.seeds = [s for s in self.state.seeds if s.id != seed.id]
            logger.info("Planted %s in slot %d", seed.species_id, slot_index)
            return plant, None

    def delete_plant(self, plant_id: str) -> Tuple[bool, Optional[str]]:
        with self._lock:
            self._sync()
            try:
                self._require_plant(plant_id)
                if self.state.active_session is not None:
                    raise GardenActionError("Cannot remove a plant during a focus session.")
            except GardenActionError as e:
                logger.info("Rejected deletion: %s", e)
                return False, str(e)

            self.repo.delete_plant(plant_id)
            self.state.plants = [p for p in self.state.plants if p.id != plant_id]
            logger.info("Removed plant %s", plant_id)
            return True, None

    def rename_plant(self, plant_id: str, nickname: Optional[str]) -> Tuple[Optional[Plant], Optional[str]]:
        with self._lock:
            self._sync()
            try:
                plant = self._require_plant(plant_id)
            except GardenActionError as e:
                return self._rejected('rename', e)

            renamed = replace(plant, nickname=nickname or None, updated_at=self.clock())
            self.repo.save_plant(renamed)
            self._replace_plant(renamed)
            return renamed, None

    # ========================================
    # Care
    # ========================================

    def _care_action(self, plant_id: str, action: Callable[[Plant, int], Plant], name: str):
        with self._lock:
            self._sync()
            current_time = self.clock()
            try:
                plant = self._require_plant(plant_id)
                # Bring decay up to date so the action lands on current levels
                decayed = care_engine.apply_time_decay(plant, current_time, self.rng)
                updated = action(decayed, current_time)
            except GardenActionError as e:
                return self._rejected(name, e)

            self.repo.save_plant(updated)
            self._replace_plant(updated)
            return updated, None

    def water_plant(self, plant_id: str):
        return self._care_action(plant_id, care_engine.water_plant, 'watering')

    def fertilize_plant(self, plant_id: str):
        return self._care_action(plant_id, care_engine.fertilize_plant, 'fertilizing')

    def cure_plant(self, plant_id: str):
        return self._care_action(plant_id, care_engine.cure_plant, 'cure')

    def tick_decay(self, current_time: Optional[int] = None) -> List[Plant]:
        """
        Apply time decay to every plant and persist the changes.

        Returns:
            Plants that died during this tick.
        """
        with self._lock:
            self._sync()
            if current_time is None:
                current_time = self.clock()

            decayed = [care_engine.apply_time_decay(p, current_time, self.rng) for p in self.state.plants]
            changed = [new for old, new in zip(self.state.plants, decayed) if new is not old]
            if changed:
                self.repo.save_plants(changed)

            newly_dead = [
                new for old, new in zip(self.state.plants, decayed)
                if new.is_dead and not old.is_dead
            ]
            for plant in newly_dead:
                logger.warning("Plant %s in slot %d has died", plant.id, plant.slot_index)

            self.state.plants = decayed
            return newly_dead

    # ========================================
    # Focus sessions
    # ========================================

    def start_session(self, minutes) -> Tuple[Optional[FocusSession], Optional[str]]:
        with self._lock:
            self._sync()
            try:
                if not self.state.plants:
                    raise GardenActionError("There are no plants growing.")
                if self.state.active_session is not None:
                    raise GardenActionError("A focus session is already running.")
                try:
                    minutes = SessionMinutes(int(minutes))
                except (TypeError, ValueError):
                    raise GardenActionError(f"Invalid session length: {minutes}")
            except GardenActionError as e:
                return self._rejected('session start', e)

            session = focus_engine.start_session(minutes, self.clock())
            self.repo.set_active_session(session)
            self.state.active_session = session
            logger.info("Started %d-minute session %s", int(minutes), session.id)
            return session, None

    def check_session_completion(self, current_time: Optional[int] = None) -> Optional[List[PlantSessionResult]]:
        """
        Complete the active session if its time is up.

        Returns:
            The per-plant results when the session was completed by this
            call, otherwise None.
        """
        with self._lock:
            self._sync()
            session = self.state.active_session
            if session is None:
                return None
            if current_time is None:
                current_time = self.clock()
            if not focus_engine.is_completed(session, current_time):
                return None

            plants = [care_engine.apply_time_decay(p, current_time, self.rng) for p in self.state.plants]
            completed, results = focus_engine.complete(session, plants, current_time, self.rng)
            if not self._finish_session(completed, plants, results, current_time):
                return None
            logger.info(
                "Completed session %s: %d GP total, %d new mutation(s)",
                completed.id,
                sum(r.earned_gp for r in results),
                sum(1 for r in results if r.new_mutation is not None),
            )
            return results

    def interrupt_session(self) -> Tuple[Optional[List[PlantSessionResult]], Optional[str]]:
        with self._lock:
            self._sync()
            session = self.state.active_session
            if session is None:
                return self._rejected('interrupt', GardenActionError("No focus session is running."))

            current_time = self.clock()
            interrupted, results = focus_engine.interrupt(session, self.state.plants, current_time)
            if not self._finish_session(interrupted, self.state.plants, results, current_time):
                return self._rejected('interrupt', GardenActionError("The focus session has already ended."))
            logger.info("Interrupted session %s", interrupted.id)
            return results, None

    def _finish_session(self, session: FocusSession, plants: List[Plant], results: List[PlantSessionResult], current_time: int) -> bool:
        """Persist a finished session; False if another process finished it first."""
        updated = focus_engine.apply_results(plants, results, current_time)
        try:
            self.repo.save_session_outcome(session, updated)
        except InvalidTransitionError:
            logger.warning("Session %s was already finished elsewhere", session.id)
            self._sync()
            return False
        self.state.plants = updated
        self.state.active_session = None
        self.state.last_session = session
        self.state.last_results = results
        return True

    def last_summary(self) -> Optional[SessionSummary]:
        if self.state.last_session is None:
            return None
        return focus_engine.summarize(self.state.last_session, self.state.last_results)

    def clear_session_results(self):
        with self._lock:
            self.state.last_session = None
            self.state.last_results = []

    def current_progress(self, current_time: Optional[int] = None) -> float:
        session = self.state.active_session
        if session is None:
            return 0.0
        return focus_engine.progress(session, current_time if current_time is not None else self.clock())

    def remaining_time(self, current_time: Optional[int] = None) -> int:
        session = self.state.active_session
        if session is None:
            return 0
        return focus_engine.remaining(session, current_time if current_time is not None else self.clock())

    # ========================================
    # Gacha and slots
    # ========================================

    def _refresh_gacha_status(self, current_time: int):
        used, last_reset = self.repo.get_gacha_counters()
        if gacha_engine.should_reset_free_draws(last_reset, current_time):
            self.repo.set_gacha_counters(0, current_time)
            used, last_reset = 0, current_time
        self.state.free_draws_remaining = gacha_engine.free_draws_remaining(last_reset, used, current_time)

    def refresh_gacha_status(self) -> int:
        """Apply the daily reset if due and return the free draws left."""
        with self._lock:
            self._refresh_gacha_status(self.clock())
            return self.state.free_draws_remaining

    def draw_gacha(self, is_free: bool = True) -> Tuple[Optional[Seed], Optional[str]]:
        with self._lock:
            self._sync()
            current_time = self.clock()
            self._refresh_gacha_status(current_time)
            if is_free and self.state.free_draws_remaining <= 0:
                return self._rejected('gacha draw', GardenActionError("No free draws left today."))

            seed = gacha_engine.draw_seed(is_free, self.rng, current_time)
            self.repo.add_seed(seed)
            if is_free:
                used, last_reset = self.repo.get_gacha_counters()
                self.repo.set_gacha_counters(used + 1, last_reset)
                self.state.free_draws_remaining -= 1

            self.state.seeds = self.state.seeds + [seed]
            self.state.last_draw = seed
            logger.info("Drew a %s seed (%s)", seed.species_id, 'free' if is_free else 'paid')
            return seed, None

    def set_max_slots(self, n: int) -> Tuple[Optional[int], Optional[str]]:
        with self._lock:
            self._sync()
            occupied = self.occupied_slots()
            required = (occupied[-1] + 1) if occupied else 1
            if n < required:
                return self._rejected(
                    'slot change',
                    GardenActionError(f"At least {required} slot(s) are needed for the current plants."),
                )
            self.repo.set_max_slots(n)
            self.state.max_slots = n
            return n, None

    def reset_all_data(self):
        """Wipe the repository and reload an empty garden."""
        with self._lock:
            if self.default_max_slots is None:
                self.repo.reset_all_data()
            else:
                self.repo.reset_all_data(self.default_max_slots)
            self.state = GardenState()
            self.load()
