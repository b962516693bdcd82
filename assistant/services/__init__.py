"""
Services Module - Sessions, confirmation, dispatch and OS effects.

- outcome: the result type of every turn
- session_store: per-session awaiting / pending-confirmation state
- confirmation: yes/no gate for sensitive actions
- dispatcher: the turn algorithm
- system_commands: OS side effects used by skills
- session_cleanup: host-side expiry loop
"""
