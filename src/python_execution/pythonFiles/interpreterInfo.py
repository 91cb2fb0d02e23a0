import json
import sys

obj = {}
obj["versionInfo"] = tuple(sys.version_info[:4])
obj["sysPrefix"] = sys.prefix
obj["sysVersion"] = sys.version
obj["is64Bit"] = sys.maxsize > 2**32

print(json.dumps(obj))
