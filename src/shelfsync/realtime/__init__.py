"""Real-time infrastructure — in-process registry + WebSocket fan-out.

Learn: Events flow in one direction:
1. HTTP handler commits a write → EventPublisher.publish(inventory_id, event)
2. Publisher → ConnectionRegistry snapshot → each ClientConnection buffer
3. Per-connection sender task → WebSocket → browser

One registry and one publisher live on app.state and are injected where
needed; nothing here is a module-level singleton.
"""
