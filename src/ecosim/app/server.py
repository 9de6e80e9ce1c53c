from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response

from ..sim.core.agent import Gene
from ..sim.core.config import SimulationConfig
from ..sim.core.errors import InvalidArgument
from ..sim.core.population import PopulationManager, TickStatus
from ..sim.core.rng import DeterministicRng
from ..sim.core.stage import Stage
from ..sim.systems.appearance import AppearanceGenerator


class SimulationController:
    def __init__(self, config: SimulationConfig):
        self.config = config
        self.stage = Stage()
        self.manager = PopulationManager(self.stage, self.stage, config)
        self.running = False
        self.speed_multiplier = 1.0
        self.food_frequency = 0.0
        self._lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    def ensure_loop(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())

    async def start(self) -> None:
        self.ensure_loop()
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.manager.reset()
            self.stage.running = True
        self.running = False

    async def step(self) -> dict:
        async with self._lock:
            if self.food_frequency > 0:
                self.manager.add_food(self.food_frequency)
            result = self.manager.tick()
        if result.status is TickStatus.NO_ORGANISMS:
            self.running = False
        payload = {"status": result.status.value, "message": result.message}
        if result.metrics is not None:
            payload["metrics"] = asdict(result.metrics)
        return payload

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.speed_multiplier)
            if not self.running:
                continue
            await self.step()

    def template(self, name: str):
        try:
            return self.stage.get_sprite(name)
        except InvalidArgument:
            return self.stage.add_sprite(name)


app = FastAPI(title="Ecosystem Simulation")
controller = SimulationController(SimulationConfig())


def _bad_request(exc: InvalidArgument) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


@app.on_event("startup")
async def _startup() -> None:
    controller.ensure_loop()


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.manager.snapshot()
    return JSONResponse(
        {
            "running": controller.running,
            "halted": controller.manager.halted,
            "tick": controller.manager.tick_count,
            "organisms": len(snapshot.organisms),
            "food": len(snapshot.food),
            "poison": len(snapshot.poison),
            "enemies": len(snapshot.enemies),
            "metrics": asdict(snapshot.metrics),
        }
    )


@app.get("/api/snapshot")
async def snapshot() -> JSONResponse:
    return JSONResponse(asdict(controller.manager.snapshot()))


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.manager.tick_count})


@app.post("/api/control/tick")
async def tick_simulation() -> JSONResponse:
    return JSONResponse(await controller.step())


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/food")
async def define_food(payload: dict) -> JSONResponse:
    try:
        template = controller.template(payload.get("sprite", "Food"))
        async with controller._lock:
            size = controller.manager.define_food(template, payload.get("max", 10))
        frequency = float(payload.get("frequency", controller.food_frequency))
    except InvalidArgument as exc:
        raise _bad_request(exc) from exc
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    controller.food_frequency = max(0.0, min(100.0, frequency))
    return JSONResponse({"food": size})


@app.post("/api/poison")
async def define_poison(payload: dict) -> JSONResponse:
    try:
        template = controller.template(payload.get("sprite", "Poison"))
        async with controller._lock:
            size = controller.manager.define_poison(template, payload.get("max", 10))
    except InvalidArgument as exc:
        raise _bad_request(exc) from exc
    return JSONResponse({"poison": size})


@app.post("/api/population")
async def create_population(payload: dict) -> JSONResponse:
    try:
        template = controller.template(payload.get("sprite", "Organism"))
        async with controller._lock:
            controller.manager.create_population(template, payload.get("copies", 10))
    except InvalidArgument as exc:
        raise _bad_request(exc) from exc
    return JSONResponse({"organisms": len(controller.manager.organisms)})


@app.post("/api/enemies")
async def define_enemies(payload: dict) -> JSONResponse:
    try:
        template = controller.template(payload.get("sprite", "Enemy"))
        async with controller._lock:
            controller.manager.define_enemies(template, payload.get("copies", 1))
    except InvalidArgument as exc:
        raise _bad_request(exc) from exc
    return JSONResponse({"enemies": len(controller.manager.enemies)})


@app.post("/api/kinetics")
async def set_kinetics(payload: dict) -> JSONResponse:
    try:
        controller.manager.set_kinetics(payload.get("mass", 1.0), payload.get("max_force", 0.5))
    except (InvalidArgument, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse({"mass": controller.manager.mass, "max_force": controller.manager.max_force})


@app.get("/api/best")
async def best() -> JSONResponse:
    manager = controller.manager
    return JSONResponse(
        {
            "food_attraction": manager.best_genome_value(Gene.FOOD_ATTRACTION),
            "poison_attraction": manager.best_genome_value(Gene.POISON_ATTRACTION),
            "food_perception": manager.best_genome_value(Gene.FOOD_PERCEPTION),
            "poison_perception": manager.best_genome_value(Gene.POISON_PERCEPTION),
            "health": manager.best_health(),
        }
    )


@app.post("/api/best/say")
async def say_best(payload: dict) -> JSONResponse:
    async with controller._lock:
        message = controller.manager.say_best(payload.get("text", ""))
    return JSONResponse({"said": message})


@app.get("/api/appearance")
async def appearance(food: float, poison: float, seed: Optional[int] = None) -> Response:
    settings = controller.config.appearance
    rng = DeterministicRng(seed if seed is not None else controller.config.seed)
    generator = AppearanceGenerator(
        settings.width,
        settings.height,
        rng=rng,
        margin=settings.margin,
        max_eye_radius=settings.max_eye_radius,
    )
    svg = generator.generate(food, poison, settings.magnitude)
    return Response(content=svg, media_type="image/svg+xml")


__all__ = ["app", "controller"]
