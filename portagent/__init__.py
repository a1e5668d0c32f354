"""portagent - iterative PS2-to-PSP porting agent.

A command-line loop that asks a remote language model for a JSON plan,
executes its actions (write a script, run a command, log a note) in a local
working area, and repeats until the model is done or the iteration ceiling
is reached.
"""

__version__ = "0.1.0"
