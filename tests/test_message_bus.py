from communication.message import Message, MessageType


def message(msg_type, sender, receiver=None, content=None):
    return Message(msg_type=msg_type, sender=sender, receiver=receiver, content=content or {})


def test_direct_and_broadcast_routing(bus):
    inbox = {"Coordinator": [], "Scanner": [], "Exporter": []}
    for name, received in inbox.items():
        bus.register(name, received.append)

    bus.send(message(MessageType.CONFLICT, "Scanner", "Coordinator"))
    bus.send(message(MessageType.SCAN_COMPLETE, "Scanner"))

    assert [m.msg_type for m in inbox["Coordinator"]] == [
        MessageType.CONFLICT, MessageType.SCAN_COMPLETE,
    ]
    assert [m.msg_type for m in inbox["Exporter"]] == [MessageType.SCAN_COMPLETE]
    assert inbox["Scanner"] == []


def test_unknown_receiver_is_kept_undelivered(bus):
    lost = message(MessageType.ASSIGNMENT, "Coordinator", "Payroll")

    bus.send(lost)

    assert bus.undelivered == [lost]
    assert bus.get_history() == [lost]


def test_history_filters(bus):
    bus.register("Coordinator", lambda m: None)
    bus.send(message(MessageType.ASSIGNMENT, "Coordinator"))
    bus.send(message(MessageType.CONFLICT, "Scanner", "Coordinator"))
    bus.send(message(MessageType.CONFLICT, "Scanner", "Coordinator"))

    assert len(bus.get_history(sender="Scanner")) == 2
    assert len(bus.get_history(receiver="Coordinator")) == 2
    assert len(bus.get_history(msg_type=MessageType.ASSIGNMENT)) == 1


def test_handlers_may_send_while_handling(bus):
    replies = []

    def coordinator(msg):
        bus.send(message(MessageType.ASSIGNMENT, "Coordinator", "Scanner"))

    bus.register("Coordinator", coordinator)
    bus.register("Scanner", replies.append)

    bus.send(message(MessageType.CONFLICT, "Scanner", "Coordinator"))

    assert [m.msg_type for m in replies] == [MessageType.ASSIGNMENT]
