from fbexp.app.commands import fastboot, session

COMMAND_MODULES = [session, fastboot]
