"""
Demonstration of the data flow: raw segments -> suggestions -> scene -> VP -> offside line.

Assumptions:
- A broadcast-style photo of 1280x720 pixels where the touchline-parallel
  markings converge to the left.
- Segments come from JSON here; with a real image use HoughSegmentSource.
"""

from __future__ import annotations

from offsidecalc.config import Config
from offsidecalc.data_structures import Point
from offsidecalc.logging_config import setup_logging
from offsidecalc.offside import is_beyond_line, offside_margin
from offsidecalc.segment_source import StaticSegmentSource, segments_from_rows
from offsidecalc.session import EditingSession


def main() -> None:
    setup_logging("INFO")

    # 1) Raw segments as a Hough detector would report them (two near-duplicates
    #    on the first marking, which the reducer merges).
    rows = [
        [200.0, 300.0, 1100.0, 330.0],
        [250.0, 302.0, 900.0, 324.0],
        [150.0, 500.0, 1200.0, 560.0],
        [100.0, 650.0, 1250.0, 735.0],
    ]
    session = EditingSession(StaticSegmentSource(segments_from_rows(rows)), config=Config())
    session.load_image(1280, 720)

    # 2) Detect, review, accept.
    for cand in session.run_detection():
        print(f"suggestion {cand.candidate_id}: confidence {cand.confidence:.2f}")
    session.accept_suggestions()
    scene = session.scene
    print("Vanishing point:", scene.vp)

    # 3) Project the second-to-last defender and draw the offside line.
    projection = scene.add_player_projection(body=Point(640.0, 420.0), ground_click=Point(0.0, 520.0))
    if projection is None or projection.offside_line is None:
        print("No offside line could be drawn.")
        return

    # 4) Compare an attacker's ground point; the defenders' goal is to the right.
    attacker = Point(700.0, 515.0)
    towards_own_half = Point(0.0, 520.0)
    margin = offside_margin(projection.offside_line, attacker, towards_own_half)
    print(f"Attacker margin: {margin:.1f} px, beyond line: "
          f"{is_beyond_line(projection.offside_line, attacker, towards_own_half)}")


if __name__ == "__main__":
    main()
