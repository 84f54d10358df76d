"""
FactoryModel — machine failure / repair / spare-replacement loop (SimPy).

A line needs `num_operating` machines running.  Each running machine
fails after a random lifetime and goes to the repair shop, where a pool
of repairmen (simpy.Resource) fixes machines one at a time.  Repaired
machines return to the spare pool (simpy.Store).  When a machine fails
the slot takes the next spare; if the pool is empty the slot stays idle
until a repair completes.

The system CRASHES at the first failure that finds the spare pool empty.

All defaults come from factory_grid (single source of truth).
"""

import math
import logging
import random

import simpy

from analysis_reports.simulation.factory_grid import FactoryParams

logger = logging.getLogger(__name__)


class FactoryModel:
    """One replication of the factory over `params.horizon` days."""

    def __init__(self, params: FactoryParams = None):
        self.params = params or FactoryParams()
        self._state = None

    # ── Random draws ────────────────────────────────────────────────────

    def draw_life(self) -> float:
        p = self.params
        if p.life_dist == "weibull":
            # scale so that E[life] == mean_life
            scale = p.mean_life / math.gamma(1.0 + 1.0 / p.weibull_shape)
            return random.weibullvariate(scale, p.weibull_shape)
        return random.expovariate(1.0 / p.mean_life)

    def draw_repair(self) -> float:
        return random.expovariate(1.0 / self.params.mean_repair)

    # ── State ───────────────────────────────────────────────────────────

    def _make_state(self):
        return {
            "operating": 0,
            "last_change": 0.0,
            "operating_area": 0.0,
            "full_time": 0.0,
            "failures": 0,
            "repairs": 0,
            "crashed": False,
            "crash_time": None,
            "repair_busy": 0.0,
            "in_repair": {},
            "max_queue": 0,
        }

    def _set_operating(self, env, state, delta):
        dt = env.now - state["last_change"]
        state["operating_area"] += state["operating"] * dt
        if state["operating"] >= self.params.num_operating:
            state["full_time"] += dt
        state["last_change"] = env.now
        state["operating"] += delta

    # ── SimPy processes ─────────────────────────────────────────────────

    def _slot_process(self, env, spares, repairmen, state, stop, stop_at_crash):
        machine = yield spares.get()
        self._set_operating(env, state, +1)

        while True:
            yield env.timeout(self.draw_life())

            # FAILURE
            state["failures"] += 1
            self._set_operating(env, state, -1)
            env.process(self._repair_process(env, spares, repairmen, state, machine))

            if not spares.items and not state["crashed"]:
                state["crashed"] = True
                state["crash_time"] = env.now
                logger.debug("crash at t=%.3f after %d failures", env.now, state["failures"])
                if stop_at_crash and not stop.triggered:
                    stop.succeed()

            # REPLACEMENT (waits for a repair if the pool is empty)
            machine = yield spares.get()
            if self.params.swap_time > 0:
                yield env.timeout(self.params.swap_time)
            self._set_operating(env, state, +1)

    def _repair_process(self, env, spares, repairmen, state, machine):
        with repairmen.request() as req:
            state["max_queue"] = max(state["max_queue"], len(repairmen.queue))
            yield req
            state["in_repair"][machine] = env.now
            repair_t = self.draw_repair()
            yield env.timeout(repair_t)
            del state["in_repair"][machine]
            state["repair_busy"] += repair_t
        state["repairs"] += 1
        yield spares.put(machine)

    def _horizon_watch(self, env, stop):
        yield env.timeout(self.params.horizon)
        if not stop.triggered:
            stop.succeed()

    # ── Results ─────────────────────────────────────────────────────────

    def _build_results(self, env, state):
        p = self.params
        end = env.now
        self._set_operating(env, state, 0)
        busy = state["repair_busy"] + sum(end - t for t in state["in_repair"].values())

        return dict(
            spares=p.spares,
            repairmen=p.repairmen,
            crashed=state["crashed"],
            crash_time=state["crash_time"],
            failures=state["failures"],
            repairs=state["repairs"],
            sim_time=end,
            availability=state["full_time"] / end if end > 0 else 1.0,
            mean_operating=state["operating_area"] / end if end > 0 else float(p.num_operating),
            repair_util=busy / (p.repairmen * end) if end > 0 else 0.0,
            max_queue=state["max_queue"],
        )

    # ── Simulate ────────────────────────────────────────────────────────

    def simulate(self, seed=None, stop_at_crash=True) -> dict:
        """Run one replication in its own SimPy environment.

        With stop_at_crash=True the run ends at the crash (or the horizon,
        whichever comes first).  Otherwise the line keeps running degraded
        until the horizon so availability covers the whole period.
        """
        if seed is not None:
            random.seed(seed)

        p = self.params
        env = simpy.Environment()
        repairmen = simpy.Resource(env, capacity=p.repairmen)
        spares = simpy.Store(env)
        spares.items.extend(range(p.num_operating + p.spares))
        stop = env.event()
        state = self._make_state()

        for _ in range(p.num_operating):
            env.process(self._slot_process(env, spares, repairmen, state, stop, stop_at_crash))
        env.process(self._horizon_watch(env, stop))
        env.run(until=stop)

        self._state = state
        return self._build_results(env, state)

    def get_state(self) -> dict:
        """Raw counters of the last replication."""
        return self._state
