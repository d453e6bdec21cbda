"""Cross-cutting helpers shared by the Draco API."""
