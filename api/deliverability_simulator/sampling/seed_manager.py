"""Deterministic random rolls for spam trap detection.

All randomness in the resolution engine flows through this manager,
so the same room code, round, team and client always produce the same
trap outcome.
"""

from __future__ import annotations

import hashlib

ROLL_RESOLUTION = 10000


class SeedManager:
    """Derives reproducible rolls in [0, 1) from seed components.

    Seed derivation hierarchy:
    - room_code
      └── round
          └── team name
              └── client id          (client roll)
                  └── destination    (destination roll)

    Components are joined with "-" and hashed with SHA-256. The first 8
    bytes, read big-endian, are reduced modulo 10000 and scaled to [0, 1).
    The algorithm is frozen: changing it changes every recorded outcome.

    Example:
        >>> manager = SeedManager(room_code="ABC123")
        >>> manager.client_roll(1, "SendWave", "client-1") == manager.client_roll(
        ...     1, "SendWave", "client-1"
        ... )
        True
    """

    def __init__(self, room_code: str) -> None:
        """Initialize the seed manager.

        Args:
            room_code: Stable room identifier, used only as seed material.
        """
        self.room_code = room_code

    def seed_string(self, *components: str | int) -> str:
        """Seed string for the given components, prefixed by the room code."""
        return "-".join(str(c) for c in [self.room_code, *components])

    def derive_roll(self, *components: str | int) -> float:
        """Derive a roll in [0, 1) from room code and components.

        Args:
            *components: Hierarchical components (e.g. 2, "SendWave", "client-1")

        Returns:
            Deterministic roll with four decimal digits of resolution.
        """
        key = self.seed_string(*components)
        hash_bytes = hashlib.sha256(key.encode()).digest()
        bucket = int.from_bytes(hash_bytes[:8], byteorder="big") % ROLL_RESOLUTION
        return bucket / ROLL_RESOLUTION

    def client_roll(self, round_number: int, team_name: str, client_id: str) -> float:
        """Primary roll for a client, kept for auditing.

        Args:
            round_number: Round being resolved.
            team_name: Sender team owning the client.
            client_id: Client id.

        Returns:
            Deterministic roll in [0, 1).
        """
        return self.derive_roll(round_number, team_name, client_id)

    def destination_roll(
        self, round_number: int, team_name: str, client_id: str, destination: str
    ) -> float:
        """Independent roll for a (client, destination) pair.

        Args:
            round_number: Round being resolved.
            team_name: Sender team owning the client.
            client_id: Client id.
            destination: Destination name.

        Returns:
            Deterministic roll in [0, 1).
        """
        return self.derive_roll(round_number, team_name, client_id, destination)
