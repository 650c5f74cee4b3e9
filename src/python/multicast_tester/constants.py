MULTICAST_GROUP = "239.0.0.3"
PORT = 14000

# Both roles agree on this out of band; it is never transmitted.
BATCH_SIZE = 10

MARKER_PAYLOAD = b"General Kenobi!"
TERMINAL_MARKER_PAYLOAD = b"Until next time!"
ACK_PAYLOAD = b"Hello there!"

SEND_INTERVAL = 1.0
MULTICAST_TTL = 1
RECV_BUFFER_SIZE = 65536

PACKET_DUMP_ENV = "MCAST_TESTER_PACKET_DUMP"

SEPARATOR = "------------------------"
