"""Game client: simulation, timing and the session state machine.

Rendering and audio live outside this package; they read the session and
SimulationContext and consume engine cues.
"""
