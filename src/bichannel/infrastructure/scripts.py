"""Central registry for Redis Lua scripts used by the channel ledger.

Scripts are registered at application startup for EVALSHA optimization.

``commit_batch`` is a multi-key compare-and-set. Amounts can reach 2**128 - 1,
which Lua numbers cannot represent, so all arithmetic happens in Python and
the script only guarantees that nothing changed between the read and the
write.

    KEYS:  the n keys touched by the batch
    ARGV:  ARGV[1..n]      value each key held when it was read ('' = absent)
           ARGV[n+1..2n]   value to store (a key is left alone when its new
                           value equals its expected value)

Return Code Conventions:
    - {1, ''}  : every key matched; all writes applied.
    - {0, key} : ``key`` no longer holds its expected value; nothing written.
"""

LEDGER_SCRIPTS = {
    "commit_batch": """
        local n = #KEYS
        for i = 1, n do
            local current = redis.call('GET', KEYS[i])
            if current == false then
                current = ''
            end
            if current ~= ARGV[i] then
                return {0, KEYS[i]}
            end
        end
        for i = 1, n do
            local expected = ARGV[i]
            local new_val = ARGV[n + i]
            if new_val ~= expected then
                redis.call('SET', KEYS[i], new_val)
            end
        end
        return {1, ''}
    """,
}
