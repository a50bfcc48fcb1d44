# config.py

# Ring Configuration
VIRTUAL_NODES = 3           # Virtual nodes per server on the hash ring
VNODE_SEPARATOR = "_VN_"    # vnode name = <server><separator><replica index>

# Demo scenario
DEMO_SERVERS = ["Server1", "Server2", "Server3"]
DEMO_KEYS = ["Key1", "Key2", "Key3", "Key4", "Key5"]
DEMO_NEW_SERVER = "Server4"
DEMO_REMOVED_SERVER = "Server2"

# Load analysis
DISTRIBUTION_SAMPLE_KEYS = 1000
